#!/usr/bin/env python

import sys

try:
    from repoman.main import main as run_main_process # Import the main function from repoman.main
except ImportError as e:
    print(f"Error: Could not import the main application module. Is the 'repoman' directory available?", file=sys.stderr)
    print(f"Details: {e}", file=sys.stderr)
    sys.exit(1)


if __name__ == "__main__":
    # Execute the requested action and exit with its status code
    sys.exit(run_main_process())
