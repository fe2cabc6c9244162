# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Archaeologist CLI

Usage:
    archaeologist run --event-name pull_request --event-path event.json
    archaeologist config
"""

from .main import cli, main

__all__ = ['cli', 'main']
