"""
FaultForward CLI - post-mortem inspection of captured panics.

Usage:
    ff show panic.json
    ff show panic.yaml --full
    ff version
"""

from .. import __version__

__cli_name__ = "ff"
