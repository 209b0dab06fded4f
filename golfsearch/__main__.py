import sys

from golfsearch.cli import main

sys.exit(main())
