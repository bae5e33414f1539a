"""
MyToken CLI Tools
"""

from .deploy import cli

__all__ = ["cli"]
