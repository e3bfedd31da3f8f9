import sys

from pyorthoreg.cli import main

sys.exit(main())
