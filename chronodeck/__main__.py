"""Entry point for Chrono Deck: python -m chronodeck"""

import sys

from chronodeck.chronodeck import main

if __name__ == "__main__":
    sys.exit(main())
