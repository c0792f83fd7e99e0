"""
Shop BFF: cache-first backend for Shopify customers and draft orders.
"""

__version__ = "0.1.0"
