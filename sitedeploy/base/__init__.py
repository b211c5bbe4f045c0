"""
sitedeploy Base Command Classes
"""

from .base_command import BaseCommand

__all__ = [
    "BaseCommand",
]
