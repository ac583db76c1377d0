import sys

from launchpad.pipeline.run import main

if __name__ == "__main__":
    sys.exit(main())
