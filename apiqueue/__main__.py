"""Main entry point when executing apiqueue as a package.

This allows running the package using python -m apiqueue.
"""

from apiqueue.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
