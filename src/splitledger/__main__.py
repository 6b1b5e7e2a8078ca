import sys

from splitledger.cli import main

if __name__ == "__main__":
    sys.exit(main())
