"""Shared exceptions and error handlers."""
