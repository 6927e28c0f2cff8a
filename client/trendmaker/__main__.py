import sys

from trendmaker.cli import main

sys.exit(main())
