"""Entry point for running as module: python -m gamestats"""

import sys

from gamestats.cli.commands import main

if __name__ == "__main__":
    sys.exit(main())
