"""Domain layer for condogest application.

Services are imported from their modules (``condogest.domain.gate`` etc.) so
that the database layer can import entities without loading them.
"""
