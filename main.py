"""
Favcast - command line entry point.

Usage:
    python main.py process-all --limit 20
    python main.py validate
"""

import sys

from favcast.pipeline import main


if __name__ == "__main__":
    sys.exit(main())
