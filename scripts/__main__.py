"""Allow `python -m scripts` by running the report build script."""

import sys

from scripts.build_report import main

sys.exit(main())
