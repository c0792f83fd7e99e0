"""Cache store: ORM models and sessions."""
