"""Core configuration, logging and dependencies."""
