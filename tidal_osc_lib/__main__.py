"""
Tidal OSC Library - Entry point

Run with: python -m tidal_osc_lib <command>
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
