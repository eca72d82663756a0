"""Utility functions for condogest."""

from condogest.utils.ids import new_id
from condogest.utils.passwords import hash_password, verify_password

__all__ = ["new_id", "hash_password", "verify_password"]
