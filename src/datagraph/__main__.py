"""
Entry point for running datagraph as a module.

Usage:
    python -m datagraph serve --snapshot graph.json
"""

import sys

from datagraph.main import main

if __name__ == "__main__":
    sys.exit(main())
