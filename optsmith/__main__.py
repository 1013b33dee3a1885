import sys

from .doclet import PROG, main

__prog__ = PROG

if __name__ == "__main__":
    sys.exit(main())
