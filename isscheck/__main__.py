"""Allow ``python -m isscheck``."""

import sys

from isscheck.main import main

if __name__ == "__main__":
    sys.exit(main())
