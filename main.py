import sys

from tree_plane.cli import main

if __name__ == "__main__":
    sys.exit(main())
