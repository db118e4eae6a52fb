#!/usr/bin/env python3
"""Stillpoint — entry point.

Run with:
    python main.py --minutes 10
    python -m stillpoint
"""

import sys

from stillpoint.__main__ import main


if __name__ == "__main__":
    sys.exit(main())
