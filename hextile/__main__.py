import sys

from hextile.cli import main

sys.exit(main())
