"""
Entry point for running the workshop CLI as a module.

Usage:
    python -m cli sessions list
    python -m cli sessions view SESSION_ID
    python -m cli reconcile --db path/to/workshop.db
"""

from .commands import main

if __name__ == "__main__":
    main()
