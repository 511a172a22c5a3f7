"""
Target template sets.

This module contains the template sets for the supported target languages.
"""

from .go import create_go_template_set
from .python import create_python_template_set

__all__ = ["create_go_template_set", "create_python_template_set"]
