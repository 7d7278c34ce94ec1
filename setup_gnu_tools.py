#!/usr/bin/env python3
"""
GNU Tools Setup for macOS.

Installs GNU tools with Homebrew and configures the shell via PATH.

Usage:
    setup_gnu_tools.py            # Interactive setup
    setup_gnu_tools.py --yes      # No confirmation prompt
    setup_gnu_tools.py --help     # All options
"""

import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gnu_setup.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
