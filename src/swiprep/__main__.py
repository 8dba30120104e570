"""Allow ``python -m swiprep``."""

from swiprep.cli import main

if __name__ == "__main__":
    main()
