"""
Package entry point.

Allows running the application via:

    python -m agendafacil

This simply forwards execution to agendafacil.cli.main().
"""

from agendafacil.cli import main

if __name__ == "__main__":
    main()
