"""create-digitaltwin: scaffold Digital Twin applications built on digitaltwin-core."""

__version__ = "0.1.0"
