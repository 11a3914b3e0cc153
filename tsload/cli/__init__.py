"""
Command-line interface for tsload.
"""

from tsload.cli.commands import generate, load, inspect

__all__ = ['generate', 'load', 'inspect']
