"""Allow ``python -m cph``."""

from cph.cli.app import main

if __name__ == "__main__":
    main()
