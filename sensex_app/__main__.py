"""Allow ``python -m sensex_app``."""
import sys

from .main import main

sys.exit(main())
