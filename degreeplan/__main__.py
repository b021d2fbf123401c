"""
Package entry point.

Allows running the application via:

    python -m degreeplan

This simply forwards execution to degreeplan.cli.main().
"""

from degreeplan.cli import main

if __name__ == "__main__":
    main()
