#!/usr/bin/env python3
"""Main entry point for the a11y testing bundle when run as a script."""

import sys
from pathlib import Path

# Add the package to Python path
sys.path.insert(0, str(Path(__file__).parent))

from a11y_bundle.cli.main import main

if __name__ == "__main__":
    main()
