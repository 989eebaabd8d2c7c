"""Allow ``python -m clientconfig``."""
import sys

from clientconfig.cli import main

sys.exit(main())
