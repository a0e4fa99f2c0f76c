import sys

from mgit.cli.main import main

sys.exit(main())
