"""
Analytics API Endpoints

REST API over the reporting queries: measures, magnitude, ranking, trends,
performance, segmentation and part-to-whole analysis.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from warehouse_analytics.analytics import magnitude, measures, ranking, trends
from warehouse_analytics.analytics.part_to_whole import CategoryContribution, category_contribution
from warehouse_analytics.analytics.performance import ProductYearPerformance, yearly_product_performance
from warehouse_analytics.analytics.segmentation import (
    CostRangeCount,
    CustomerSegmentCount,
    customer_spending_segments,
    product_cost_segments,
)
from warehouse_analytics.database.connection import get_db_dependency

router = APIRouter()
logger = structlog.get_logger(__name__)

TopN = Query(5, ge=1, le=1000, description="Number of rows")


class MeasuresSummary(BaseModel):
    """All headline measures in one object"""
    total_sales: int
    total_quantity: int
    average_price: Optional[float]
    total_order_lines: int
    total_orders: int
    total_products: int
    total_customers: int
    ordering_customers: int


# =============================================================================
# MEASURES
# =============================================================================

@router.get("/measures", response_model=List[measures.Measure])
async def get_key_metrics(db: AsyncSession = Depends(get_db_dependency)):
    """Key metrics as a measure_name / measure_value table."""
    return await measures.key_metrics_report(db)


@router.get("/measures/summary", response_model=MeasuresSummary)
async def get_measures_summary(db: AsyncSession = Depends(get_db_dependency)) -> MeasuresSummary:
    return MeasuresSummary(
        total_sales=await measures.total_sales(db),
        total_quantity=await measures.total_quantity(db),
        average_price=await measures.average_price(db),
        total_order_lines=await measures.total_order_lines(db),
        total_orders=await measures.total_orders(db),
        total_products=await measures.total_products(db),
        total_customers=await measures.total_customers(db),
        ordering_customers=await measures.ordering_customers(db),
    )


# =============================================================================
# MAGNITUDE
# =============================================================================

@router.get("/magnitude/customers-by-country", response_model=List[magnitude.CountryCustomers])
async def get_customers_by_country(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.customers_by_country(db)


@router.get("/magnitude/customers-by-gender", response_model=List[magnitude.GenderCustomers])
async def get_customers_by_gender(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.customers_by_gender(db)


@router.get("/magnitude/products-by-category", response_model=List[magnitude.CategoryProducts])
async def get_products_by_category(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.products_by_category(db)


@router.get("/magnitude/cost-by-category", response_model=List[magnitude.CategoryCost])
async def get_average_cost_by_category(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.average_cost_by_category(db)


@router.get("/magnitude/revenue-by-category", response_model=List[magnitude.CategoryRevenue])
async def get_revenue_by_category(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.revenue_by_category(db)


@router.get("/magnitude/revenue-by-customer", response_model=List[magnitude.CustomerRevenue])
async def get_revenue_by_customer(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.revenue_by_customer(db)


@router.get("/magnitude/sold-items-by-country", response_model=List[magnitude.CountrySoldItems])
async def get_sold_items_by_country(db: AsyncSession = Depends(get_db_dependency)):
    return await magnitude.sold_items_by_country(db)


# =============================================================================
# RANKING
# =============================================================================

@router.get("/ranking/top-products", response_model=List[ranking.ProductRevenue])
async def get_top_products(n: int = TopN, db: AsyncSession = Depends(get_db_dependency)):
    return await ranking.top_products(db, n)


@router.get("/ranking/bottom-products", response_model=List[ranking.ProductRevenue])
async def get_bottom_products(n: int = TopN, db: AsyncSession = Depends(get_db_dependency)):
    return await ranking.bottom_products(db, n)


@router.get("/ranking/ranked-products", response_model=List[ranking.RankedProduct])
async def get_ranked_products(n: int = TopN, db: AsyncSession = Depends(get_db_dependency)):
    """Products ranked with RANK(); ties can return more than n rows."""
    return await ranking.ranked_products(db, n)


@router.get("/ranking/top-customers", response_model=List[magnitude.CustomerRevenue])
async def get_top_customers(
    n: int = Query(10, ge=1, le=1000),
    db: AsyncSession = Depends(get_db_dependency),
):
    return await ranking.top_customers(db, n)


@router.get("/ranking/least-active-customers", response_model=List[ranking.CustomerOrders])
async def get_least_active_customers(
    n: int = Query(3, ge=1, le=1000),
    db: AsyncSession = Depends(get_db_dependency),
):
    return await ranking.least_active_customers(db, n)


# =============================================================================
# CHANGE OVER TIME
# =============================================================================

@router.get("/trends/year-month", response_model=List[trends.YearMonthSales])
async def get_sales_by_year_month(db: AsyncSession = Depends(get_db_dependency)):
    return await trends.sales_by_year_month(db)


@router.get("/trends/monthly", response_model=List[trends.PeriodSales])
async def get_monthly_sales(db: AsyncSession = Depends(get_db_dependency)):
    return await trends.sales_by_period(db, "month")


@router.get("/trends/monthly-labelled", response_model=List[trends.LabelledSales])
async def get_labelled_monthly_sales(db: AsyncSession = Depends(get_db_dependency)):
    return await trends.sales_by_month_label(db)


@router.get("/trends/cumulative", response_model=List[trends.CumulativeSales])
async def get_cumulative_sales(
    period: str = Query("year", pattern="^(year|month)$"),
    db: AsyncSession = Depends(get_db_dependency),
):
    """Running total of sales and moving average price per year or month."""
    logger.info("get_cumulative_sales called", period=period)
    return await trends.cumulative_sales(db, period)


# =============================================================================
# PERFORMANCE, SEGMENTATION, PART-TO-WHOLE
# =============================================================================

@router.get("/performance/products", response_model=List[ProductYearPerformance])
async def get_yearly_product_performance(db: AsyncSession = Depends(get_db_dependency)):
    return await yearly_product_performance(db)


@router.get("/segmentation/product-cost", response_model=List[CostRangeCount])
async def get_product_cost_segments(db: AsyncSession = Depends(get_db_dependency)):
    return await product_cost_segments(db)


@router.get("/segmentation/customers", response_model=List[CustomerSegmentCount])
async def get_customer_spending_segments(db: AsyncSession = Depends(get_db_dependency)):
    return await customer_spending_segments(db)


@router.get("/part-to-whole/categories", response_model=List[CategoryContribution])
async def get_category_contribution(db: AsyncSession = Depends(get_db_dependency)):
    return await category_contribution(db)
