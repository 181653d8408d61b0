"""Allow `python -m pinmap`."""

import sys

from pinmap.cli import main

if __name__ == "__main__":
    sys.exit(main())
