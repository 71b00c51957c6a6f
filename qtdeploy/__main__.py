import sys

from .deploy import main


if __name__ == '__main__':
    sys.exit(main())
