"""
Warehouse Analytics

Sales analytics warehouse: bulk CSV loading, catalog exploration and
reporting queries over a customer/product/sales star schema.
"""

__version__ = "1.0.0"
