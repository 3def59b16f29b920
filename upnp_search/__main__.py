"""
Entry point for running upnp_search as a module.

This allows the package to be executed with: python -m upnp_search
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
