"""
Unit Tests - API Endpoints
"""
import httpx
import pytest
from sqlalchemy.exc import DBAPIError

from warehouse_analytics.database.connection import get_db_dependency
from warehouse_analytics.main import create_app
from warehouse_analytics.reports import create_report_views
from warehouse_analytics.serving.api.routes import reports as reports_routes


@pytest.fixture
async def client(seeded_db):
    """API client whose requests run on the seeded test session"""
    app = create_app()

    async def override_db():
        yield seeded_db

    app.dependency_overrides[get_db_dependency] = override_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoints:
    """Tests for health probes"""

    async def test_liveness(self, client):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}
        assert "X-Request-ID" in response.headers
        assert "X-Response-Time" in response.headers

    async def test_health_degraded_without_database(self, client):
        """Test the global engine is not initialised in tests"""
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    async def test_readiness_without_database(self, client):
        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 503

    async def test_info(self, client):
        response = await client.get("/api/v1/info")

        assert response.json()["name"] == "Warehouse Analytics API"


class TestExplorationEndpoints:
    """Tests for exploration routes"""

    async def test_tables(self, client):
        response = await client.get("/api/v1/exploration/tables")

        assert response.status_code == 200
        assert {t["table_name"] for t in response.json()} == {"dim_customers", "dim_products", "fact_sales"}

    async def test_columns(self, client):
        response = await client.get("/api/v1/exploration/tables/fact_sales/columns")

        assert response.status_code == 200
        assert response.json()[0]["column_name"] == "order_number"

    async def test_unknown_table_columns(self, client):
        response = await client.get("/api/v1/exploration/tables/dim_stores/columns")

        assert response.status_code == 404

    async def test_countries(self, client):
        response = await client.get("/api/v1/exploration/countries")

        assert response.json() == ["Australia", "Germany", "United States"]

    async def test_order_date_range(self, client):
        response = await client.get("/api/v1/exploration/order-date-range")

        assert response.json() == {
            "first_order_date": "2012-01-15",
            "last_order_date": "2013-11-05",
            "order_range_months": 22,
        }

    async def test_customer_age_range(self, client):
        response = await client.get("/api/v1/exploration/customer-age-range", params={"as_of": "2014-06-15"})

        assert response.json()["oldest_age"] == 54


class TestAnalyticsEndpoints:
    """Tests for analytics routes"""

    async def test_measures(self, client):
        response = await client.get("/api/v1/analytics/measures")

        assert response.status_code == 200
        assert response.json()[0] == {"measure_name": "Total Sales", "measure_value": 10400.0}

    async def test_measures_summary(self, client):
        response = await client.get("/api/v1/analytics/measures/summary")
        summary = response.json()

        assert summary["total_order_lines"] == 9
        assert summary["ordering_customers"] == 3

    async def test_top_products(self, client):
        response = await client.get("/api/v1/analytics/ranking/top-products", params={"n": 1})

        assert response.json() == [{"product_name": "Road-150", "total_revenue": 6000}]

    async def test_top_n_must_be_positive(self, client):
        response = await client.get("/api/v1/analytics/ranking/top-products", params={"n": 0})

        assert response.status_code == 422

    async def test_cumulative(self, client):
        response = await client.get("/api/v1/analytics/trends/cumulative", params={"period": "year"})

        assert [r["running_total_sales"] for r in response.json()] == [5150, 10350]

    async def test_cumulative_invalid_period(self, client):
        response = await client.get("/api/v1/analytics/trends/cumulative", params={"period": "week"})

        assert response.status_code == 422

    async def test_monthly_labelled(self, client):
        response = await client.get("/api/v1/analytics/trends/monthly-labelled")

        assert response.json()[0]["order_date"] == "2012-Jan"

    async def test_segmentation(self, client):
        response = await client.get("/api/v1/analytics/segmentation/customers")

        assert [r["customer_segment"] for r in response.json()] == ["New", "Regular", "VIP"]

    async def test_part_to_whole(self, client):
        response = await client.get("/api/v1/analytics/part-to-whole/categories")

        assert response.json()[0]["percentage_of_total"] == pytest.approx(96.15)

    async def test_performance(self, client):
        response = await client.get("/api/v1/analytics/performance/products")

        assert len(response.json()) == 6


class TestReportEndpoints:
    """Tests for report view routes"""

    async def test_views_missing(self, client):
        response = await client.get("/api/v1/reports/customers")

        assert response.status_code == 503
        assert response.json()["detail"] == reports_routes.VIEWS_MISSING

    async def test_query_failure_is_not_reported_as_missing_view(self, client, test_engine, monkeypatch):
        """Test database errors on an existing view keep their own message"""
        async with test_engine.begin() as conn:
            await create_report_views(conn)

        async def dropped_connection(*args, **kwargs):
            raise DBAPIError("SELECT", {}, ConnectionError("connection reset"))

        monkeypatch.setattr(reports_routes, "fetch_product_report", dropped_connection)

        response = await client.get("/api/v1/reports/products")

        assert response.status_code == 503
        assert response.json()["detail"] == reports_routes.QUERY_FAILED

    async def test_customer_report(self, client, test_engine):
        async with test_engine.begin() as conn:
            await create_report_views(conn)

        response = await client.get("/api/v1/reports/customers", params={"segment": "VIP"})

        assert response.status_code == 200
        assert [r["customer_name"] for r in response.json()] == ["Alice Smith"]

    async def test_product_report_paging(self, client, test_engine):
        async with test_engine.begin() as conn:
            await create_report_views(conn)

        response = await client.get("/api/v1/reports/products", params={"limit": 2})

        assert [r["product_name"] for r in response.json()] == ["Road-150", "Mountain-200"]

    async def test_invalid_segment(self, client):
        response = await client.get("/api/v1/reports/customers", params={"segment": "Gold"})

        assert response.status_code == 422
