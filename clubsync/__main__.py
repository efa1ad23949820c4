import sys

from clubsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
