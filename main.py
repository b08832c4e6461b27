#!/usr/bin/env python3
"""MenuTimer — entry point.

Run with:
    python main.py
    python -m menutimer
"""

from menutimer.__main__ import main


if __name__ == "__main__":
    main()
