"""Main entry point when executing randcli as a package.

This allows running the package using python -m randcli.
"""

from randcli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
