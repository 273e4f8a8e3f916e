"""
Core Domain Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models
    errors.py: Error codes, retry classification, HTTP status mapping
"""

from . import models
from . import logic

__all__ = [
    'models',
    'logic',
]
