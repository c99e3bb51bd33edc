import sys

from solarnoon.cli import main

sys.exit(main())
