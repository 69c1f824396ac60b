"""
Test Configuration and Fixtures
Shared testing infrastructure for the audit backend
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

from datetime import datetime
from decimal import Decimal
from typing import Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from optical_retail.api import deps
from optical_retail.core.database import Base
from optical_retail.core.security import create_company_token
from optical_retail.main import app
from optical_retail.models import (
    Bill, Category, Company, InventoryItem, Salary, Sale
)

# Test database - in-memory SQLite shared across connections
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[deps.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class DataFactory:
    """Builds tenant data directly through the session"""

    def __init__(self, db: Session):
        self.db = db

    def company(self, name: str = "Clear Vision Opticians", is_active: bool = True) -> Company:
        company = Company(name=name, is_active=is_active)
        self.db.add(company)
        self.db.commit()
        return company

    def category(self, company: Company, name: str) -> Category:
        category = Category(company_id=company.id, name=name)
        self.db.add(category)
        self.db.commit()
        return category

    def item(self, company: Company, category: Category, name: str,
             unit_price: str, total_stock: int = 10,
             created_at: Optional[datetime] = None) -> InventoryItem:
        item = InventoryItem(
            company_id=company.id,
            category_id=category.id,
            name=name,
            unit_price=Decimal(unit_price),
            total_stock=total_stock,
        )
        if created_at is not None:
            item.created_at = created_at
        self.db.add(item)
        self.db.commit()
        return item

    def sale(self, company: Company, total: str, frame: Optional[str] = None,
             lens: Optional[str] = None,
             created_at: datetime = datetime(2024, 3, 10, 14, 30)) -> Sale:
        sale = Sale(
            company_id=company.id,
            total=Decimal(total),
            frame=frame,
            lens=lens,
            created_at=created_at,
        )
        self.db.add(sale)
        self.db.commit()
        return sale

    def bill(self, company: Company, amount: str,
             created_at: datetime = datetime(2024, 3, 5, 9, 0)) -> Bill:
        bill = Bill(company_id=company.id, name="Shop rent", amount=Decimal(amount), created_at=created_at)
        self.db.add(bill)
        self.db.commit()
        return bill

    def salary(self, company: Company, amount: str,
               created_at: datetime = datetime(2024, 3, 28, 17, 0)) -> Salary:
        salary = Salary(
            company_id=company.id,
            employee_name="Optometrist",
            month=created_at.month,
            year=created_at.year,
            amount=Decimal(amount),
            created_at=created_at,
        )
        self.db.add(salary)
        self.db.commit()
        return salary


@pytest.fixture
def factory(db_session: Session) -> DataFactory:
    return DataFactory(db_session)


@pytest.fixture
def company(factory: DataFactory) -> Company:
    return factory.company()


@pytest.fixture
def other_company(factory: DataFactory) -> Company:
    return factory.company(name="Other Eyewear Ltd")


@pytest.fixture
def shop(factory: DataFactory, company: Company) -> Dict[str, object]:
    """
    A small optical shop: one frame and one lens, each in its own category
    """
    frames = factory.category(company, "Frames")
    lenses = factory.category(company, "Lenses")
    frame = factory.item(company, frames, "Ray-Ban RB5154", "300", total_stock=12)
    lens = factory.item(company, lenses, "Single Vision 1.67", "200", total_stock=40)
    return {
        "company": company,
        "frames": frames,
        "lenses": lenses,
        "frame": frame,
        "lens": lens,
    }


@pytest.fixture
def auth_headers(company: Company) -> Dict[str, str]:
    """Bearer token for the default company"""
    token = create_company_token(company.id, subject="manager@clearvision.test")
    return {"Authorization": f"Bearer {token}"}


# API test helpers
class APITestHelper:
    """Helper class for API testing"""

    @staticmethod
    def assert_error_response(response, expected_status: int, expected_detail: str = None):
        """Assert error response format"""
        assert response.status_code == expected_status
        data = response.json()
        assert "detail" in data
        if expected_detail:
            assert expected_detail in data["detail"]

    @staticmethod
    def assert_success_response(response, expected_keys: list = None):
        """Assert successful response format"""
        assert response.status_code in [200, 201]
        data = response.json()
        if expected_keys:
            for key in expected_keys:
                assert key in data
