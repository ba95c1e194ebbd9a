"""Shared test fixtures.

Rules and transactions model a small furniture company: marketing,
administration, production and logistics cost centers.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from backoffice.api.deps import get_repository
from backoffice.main import app
from backoffice.schemas.auto_analytics import AutoAnalyticalModel
from backoffice.services.auto_analytics_repository import AutoAnalyticsRepository

MODELS = [
    {
        "id": "model_marketing_general",
        "partner_tag_id": "marketing_vendors",
        "analytics_to_apply": "cc_marketing",
        "state": "confirmed",
        "created_at": "2024-01-01T00:00:00Z",
        "description": "All marketing vendor expenses go to Marketing cost center",
    },
    {
        "id": "model_office_supplies",
        "product_category_id": "office_supplies",
        "analytics_to_apply": "cc_administration",
        "state": "confirmed",
        "created_at": "2024-01-02T00:00:00Z",
        "description": "Office supplies go to Administration",
    },
    {
        "id": "model_raw_materials",
        "product_category_id": "raw_materials",
        "analytics_to_apply": "cc_production",
        "state": "confirmed",
        "created_at": "2024-01-03T00:00:00Z",
        "description": "Raw materials go to Production",
    },
    {
        "id": "model_google_ads_specific",
        "partner_id": "google_llc",
        "product_category_id": "digital_marketing",
        "analytics_to_apply": "cc_digital_marketing",
        "state": "confirmed",
        "created_at": "2024-01-04T00:00:00Z",
        "description": "Google digital marketing expenses",
    },
    {
        "id": "model_amazon_logistics",
        "partner_id": "amazon_logistics",
        "product_category_id": "shipping",
        "analytics_to_apply": "cc_logistics",
        "state": "confirmed",
        "created_at": "2024-01-05T00:00:00Z",
        "description": "Amazon shipping costs to Logistics",
    },
    {
        "id": "model_wood_supplier_premium",
        "partner_id": "premium_wood_co",
        "product_category_id": "raw_materials",
        "product_id": "oak_planks",
        "analytics_to_apply": "cc_premium_production",
        "state": "confirmed",
        "created_at": "2024-01-06T00:00:00Z",
        "description": "Premium wood supplier oak planks",
    },
    {
        "id": "model_draft_rule",
        "partner_id": "test_vendor",
        "analytics_to_apply": "cc_test",
        "state": "draft",
        "created_at": "2024-01-07T00:00:00Z",
        "description": "Draft rule, ignored by the engine",
    },
    {
        "id": "model_cancelled_rule",
        "partner_id": "old_vendor",
        "analytics_to_apply": "cc_old",
        "state": "cancelled",
        "created_at": "2024-01-08T00:00:00Z",
        "description": "Cancelled rule, ignored by the engine",
    },
]

TRANSACTIONS = [
    {
        "id": "invoice_001",
        "type": "sales_invoice",
        "status": "posted",
        "contactId": "google_llc",
        "productCategoryId": "digital_marketing",
        "productId": "google_ads_campaign",
        "amount": 2500.00,
    },
    {
        "id": "bill_001",
        "type": "purchase_bill",
        "status": "posted",
        "supplierId": "premium_wood_co",
        "productCategoryId": "raw_materials",
        "productId": "oak_planks",
        "amount": 15000.00,
    },
    {
        "id": "expense_001",
        "type": "production_expense",
        "status": "posted",
        "productCategoryId": "office_supplies",
        "productId": "printer_paper",
        "amount": 150.00,
    },
    {
        "id": "bill_002",
        "type": "purchase_bill",
        "status": "posted",
        "supplierId": "amazon_logistics",
        "productCategoryId": "shipping",
        "amount": 850.00,
    },
    {
        "id": "bill_003",
        "type": "purchase_bill",
        "status": "posted",
        "supplierId": "local_wood_supplier",
        "productCategoryId": "raw_materials",
        "productId": "pine_boards",
        "amount": 3200.00,
    },
    {
        "id": "invoice_002",
        "type": "sales_invoice",
        "status": "draft",
        "contactId": "facebook_inc",
        "partnerTagId": "marketing_vendors",
        "amount": 1800.00,
    },
    {
        "id": "expense_002",
        "type": "production_expense",
        "status": "posted",
        "productCategoryId": "utilities",
        "amount": 450.00,
    },
    {
        "id": "bill_004",
        "type": "purchase_bill",
        "status": "posted",
        "supplierId": "staples_office",
        "partnerTagId": "office_vendors",
        "productCategoryId": "office_supplies",
        "productId": "desk_chairs",
        "amount": 1200.00,
    },
]


@pytest.fixture
def models() -> list[AutoAnalyticalModel]:
    return [AutoAnalyticalModel.model_validate(m) for m in MODELS]


@pytest.fixture
def transactions() -> list[dict]:
    return [dict(t) for t in TRANSACTIONS]


@pytest.fixture
def get_models(models):
    """Rule provider returning the furniture-company models."""
    async def provider():
        return models
    return provider


@pytest.fixture
def repository(models) -> AutoAnalyticsRepository:
    return AutoAnalyticsRepository(models)


@pytest.fixture
async def client(repository):
    """Async test client for the FastAPI app, backed by a fresh repository."""
    app.dependency_overrides[get_repository] = lambda: repository
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
