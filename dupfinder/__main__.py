"""Allow ``python -m dupfinder``."""

import sys

from dupfinder.main import main

sys.exit(main())
