"""
Reports Module
"""
from .customers import CustomerReportRow, customer_report, customer_report_query, fetch_customer_report
from .products import ProductReportRow, fetch_product_report, product_report, product_report_query
from .refresh import REPORT_VIEWS, create_report_views, drop_report_views

__all__ = [
    "CustomerReportRow",
    "customer_report",
    "customer_report_query",
    "fetch_customer_report",
    "ProductReportRow",
    "product_report",
    "product_report_query",
    "fetch_product_report",
    "REPORT_VIEWS",
    "create_report_views",
    "drop_report_views",
]
