import sys

from soundcanvas.cli import main

sys.exit(main())
