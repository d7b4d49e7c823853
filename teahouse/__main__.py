"""Allow `python -m teahouse`."""

import sys

from teahouse.main import main

sys.exit(main())
