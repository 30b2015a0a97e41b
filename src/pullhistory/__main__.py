"""Allow ``python -m pullhistory``."""

import sys

from pullhistory.cli import main

sys.exit(main())
