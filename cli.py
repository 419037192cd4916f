"""CLI entry point - wrapper for running from a source checkout

Delegates to the modular cli package.
"""

from cli.main import main

if __name__ == "__main__":
    main()
