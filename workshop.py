#!/usr/bin/env python3
"""
decision-workshop: maintenance CLI

Inspect stored workshop sessions and repair interrupted finalizations.

Usage:
    python workshop.py sessions list
    python workshop.py sessions view SESSION_ID
    python workshop.py reconcile

This file is a thin wrapper around the cli package.
"""

from cli.commands import main

if __name__ == "__main__":
    main()
