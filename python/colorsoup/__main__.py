import sys

from colorsoup.cli import main

sys.exit(main())
