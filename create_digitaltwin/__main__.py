"""Allow ``python -m create_digitaltwin``."""

from create_digitaltwin.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
