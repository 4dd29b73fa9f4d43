#!/usr/bin/env python3
"""RoundBell entry point.

Run with:
    python main.py
    python -m roundbell
"""

from roundbell.__main__ import main


if __name__ == "__main__":
    main()
