"""Main entry point when executing backlogmd as a package.

This allows running the package using python -m backlogmd.
"""

from backlogmd.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
