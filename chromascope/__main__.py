"""Entry point for running chromascope as a module.

Usage:
    python -m chromascope [options] COMMAND [args...]
"""

from chromascope.cli import main

if __name__ == "__main__":
    main()
