"""Allow ``python -m andersen``."""

from andersen.main import main

if __name__ == "__main__":
    raise SystemExit(main())
