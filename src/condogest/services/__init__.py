"""External services used by the domain layer."""

from condogest.services.assistant import Assistant

__all__ = ["Assistant"]
