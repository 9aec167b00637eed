"""
Services
"""

from permguard.services.engine import Permguard, permguard

__all__ = ["Permguard", "permguard"]
