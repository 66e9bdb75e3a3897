#!/usr/bin/env python
"""Run the FastAPI server."""

import sys
import os

# Add parent directory to path for development
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from credguard.__main__ import main


if __name__ == "__main__":
    main()
