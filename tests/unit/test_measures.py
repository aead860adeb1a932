"""
Unit Tests - Measures, Magnitude and Ranking
"""
import pytest

from warehouse_analytics.analytics import magnitude, measures, ranking
from warehouse_analytics.analytics.common import check_top_n


class TestMeasures:
    """Tests for headline measures"""

    async def test_individual_measures(self, seeded_db):
        """Test each measure over the reference dataset"""
        assert await measures.total_sales(seeded_db) == 10400
        assert await measures.total_quantity(seeded_db) == 12
        assert await measures.average_price(seeded_db) == pytest.approx(1138.89, abs=0.01)
        assert await measures.total_order_lines(seeded_db) == 9
        assert await measures.total_orders(seeded_db) == 7
        assert await measures.total_products(seeded_db) == 5
        assert await measures.total_customers(seeded_db) == 4
        assert await measures.ordering_customers(seeded_db) == 3

    async def test_measures_on_empty_warehouse(self, test_db):
        """Test sums default to zero without sales"""
        assert await measures.total_sales(test_db) == 0
        assert await measures.average_price(test_db) is None
        assert await measures.total_orders(test_db) == 0

    async def test_key_metrics_report(self, seeded_db):
        """Test the combined report keeps its fixed order"""
        report = await measures.key_metrics_report(seeded_db)

        assert [m.measure_name for m in report] == [
            "Total Sales",
            "Total Quantity",
            "Average Price",
            "Total Orders",
            "Total Products",
            "Total Customers",
        ]
        values = {m.measure_name: m.measure_value for m in report}
        assert values["Total Sales"] == 10400
        assert values["Average Price"] == pytest.approx(1138.89, abs=0.01)
        assert values["Total Customers"] == 4


class TestMagnitude:
    """Tests for distributions across dimensions"""

    async def test_customers_by_country(self, seeded_db):
        rows = await magnitude.customers_by_country(seeded_db)

        assert [(r.country, r.total_customers) for r in rows] == [
            ("Germany", 2),
            ("Australia", 1),
            ("United States", 1),
        ]

    async def test_customers_by_gender(self, seeded_db):
        rows = await magnitude.customers_by_gender(seeded_db)

        assert {r.gender: r.total_customers for r in rows} == {"Female": 2, "Male": 2}

    async def test_products_by_category(self, seeded_db):
        rows = await magnitude.products_by_category(seeded_db)

        assert [(r.category, r.total_products) for r in rows] == [
            ("Bikes", 2),
            ("Clothing", 2),
            ("Accessories", 1),
        ]

    async def test_average_cost_by_category(self, seeded_db):
        """Test categories ordered by average cost"""
        rows = await magnitude.average_cost_by_category(seeded_db)

        assert [r.category for r in rows] == ["Bikes", "Clothing", "Accessories"]
        assert [r.avg_cost for r in rows] == [pytest.approx(1000), pytest.approx(55), pytest.approx(50)]

    async def test_revenue_by_category(self, seeded_db):
        """Test only categories with sales appear"""
        rows = await magnitude.revenue_by_category(seeded_db)

        assert [(r.category, r.total_revenue) for r in rows] == [
            ("Bikes", 10000),
            ("Accessories", 400),
        ]

    async def test_revenue_by_customer(self, seeded_db):
        rows = await magnitude.revenue_by_customer(seeded_db)

        assert [(r.first_name, r.total_revenue) for r in rows] == [
            ("Alice", 6150),
            ("Carla", 2200),
            ("Bob", 2050),
        ]

    async def test_unmatched_keys_group_under_null(self, orphaned_db):
        """Test sales without a dimension row are kept in a NULL group"""
        customers = await magnitude.revenue_by_customer(orphaned_db)
        categories = await magnitude.revenue_by_category(orphaned_db)

        assert [(r.customer_key, r.total_revenue) for r in customers] == [
            (1, 6150),
            (3, 2200),
            (2, 2050),
            (None, 70),
        ]
        assert (None, 70) in [(r.category, r.total_revenue) for r in categories]
        assert sum(r.total_revenue for r in categories) == 10470

    async def test_sold_items_by_country(self, seeded_db):
        rows = await magnitude.sold_items_by_country(seeded_db)

        assert [(r.country, r.total_sold_items) for r in rows] == [
            ("Germany", 10),
            ("United States", 2),
        ]


class TestRanking:
    """Tests for top-N and bottom-N rankings"""

    async def test_top_products(self, seeded_db):
        rows = await ranking.top_products(seeded_db, n=2)

        assert [(r.product_name, r.total_revenue) for r in rows] == [
            ("Road-150", 6000),
            ("Mountain-200", 4000),
        ]

    async def test_bottom_products(self, seeded_db):
        rows = await ranking.bottom_products(seeded_db, n=1)

        assert [(r.product_name, r.total_revenue) for r in rows] == [("Helmet", 400)]

    async def test_ranked_products(self, seeded_db):
        """Test window-ranked products match the top-N query"""
        rows = await ranking.ranked_products(seeded_db, n=3)

        assert [r.rank_products for r in rows] == [1, 2, 3]
        assert [r.product_name for r in rows] == ["Road-150", "Mountain-200", "Helmet"]

    async def test_ranked_products_keeps_ties(self, tied_db):
        """Test equal revenue shares a rank and every tied product is returned"""
        rows = await ranking.ranked_products(tied_db, n=1)

        assert [(r.product_name, r.rank_products) for r in rows] == [
            ("Road-150", 1),
            ("Twin", 1),
        ]

    async def test_ranked_products_skips_after_tie(self, tied_db):
        rows = await ranking.ranked_products(tied_db, n=3)

        assert [r.rank_products for r in rows] == [1, 1, 3]
        assert rows[-1].product_name == "Mountain-200"

    async def test_top_customers(self, seeded_db):
        rows = await ranking.top_customers(seeded_db, n=2)

        assert [r.customer_key for r in rows] == [1, 3]

    async def test_least_active_customers(self, seeded_db):
        """Test ties on order count break on customer key"""
        rows = await ranking.least_active_customers(seeded_db, n=1)

        assert len(rows) == 1
        assert rows[0].first_name == "Bob"
        assert rows[0].total_orders == 2

    async def test_n_larger_than_result(self, seeded_db):
        rows = await ranking.top_products(seeded_db, n=100)

        assert len(rows) == 3

    @pytest.mark.parametrize("n", [0, -1])
    def test_check_top_n_rejects_non_positive(self, n):
        with pytest.raises(ValueError, match="positive"):
            check_top_n(n)

    async def test_top_products_rejects_zero(self, seeded_db):
        with pytest.raises(ValueError):
            await ranking.top_products(seeded_db, n=0)
