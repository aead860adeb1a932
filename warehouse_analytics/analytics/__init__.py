"""
Analytics Module

Read-only reporting queries over the sales star schema.
"""
from .measures import key_metrics_report
from .part_to_whole import category_contribution
from .performance import yearly_product_performance
from .ranking import bottom_products, least_active_customers, ranked_products, top_customers, top_products
from .segmentation import customer_spending_segments, product_cost_segments
from .trends import cumulative_sales, sales_by_month_label, sales_by_period, sales_by_year_month

__all__ = [
    "key_metrics_report",
    "category_contribution",
    "yearly_product_performance",
    "top_products",
    "bottom_products",
    "ranked_products",
    "top_customers",
    "least_active_customers",
    "product_cost_segments",
    "customer_spending_segments",
    "sales_by_year_month",
    "sales_by_period",
    "sales_by_month_label",
    "cumulative_sales",
]
