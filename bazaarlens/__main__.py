"""Allow ``python -m bazaarlens``."""

from bazaarlens.cli import main

if __name__ == "__main__":
    main()
