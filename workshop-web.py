#!/usr/bin/env python3
"""
decision-workshop: HTTP API

Starts the JSON API that workshop clients (facilitator and participant
views) talk to.

Usage:
    python workshop-web.py [--port 8000] [--host 127.0.0.1]

The API is served under http://localhost:8000/api.
"""

from web.__main__ import main

if __name__ == "__main__":
    main()
