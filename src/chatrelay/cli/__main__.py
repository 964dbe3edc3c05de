#!/usr/bin/env python3
"""
Entry point for running chatrelay.cli as a module.

This allows commands like:
    python -m chatrelay.cli chat
    python -m chatrelay.cli serve --port 3001
"""

from .main import main

if __name__ == "__main__":
    main()
