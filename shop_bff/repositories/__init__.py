"""
Repositories over the local cache.
"""

from .customer import CustomerRepository
from .draft_order import DraftOrderRepository

__all__ = ["CustomerRepository", "DraftOrderRepository"]
