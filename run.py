#!/usr/bin/env python3
"""
Filtered image cache runner.

Usage:
    python run.py resolve /img/a.jpg thumbnail
    python run.py resolve /img/a.jpg thumbnail --webp
    python run.py bust /img/a.jpg thumbnail
    python run.py filters
"""

import sys

from filtercache.cli import main

if __name__ == "__main__":
    sys.exit(main())
