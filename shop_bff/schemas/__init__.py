"""Response contracts."""
