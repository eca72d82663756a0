"""CLI layer for condogest application."""
