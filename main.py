#!/usr/bin/env python3
"""IntervalTimer — entry point.

Run with:
    python main.py --work 3:00 --rest 1:00
    python -m intervaltimer
"""

import sys

from intervaltimer.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
