from datetime import date

import pytest

from wealthsim.config import reset_config
from wealthsim.services import (
    AllocationService,
    DataService,
    DebtService,
    EventService,
    ProjectionService,
)


@pytest.fixture(autouse=True)
def default_config():
    yield reset_config()
    reset_config()


@pytest.fixture
def now() -> date:
    return date(2025, 1, 15)


@pytest.fixture
def debt_service() -> DebtService:
    return DebtService()


@pytest.fixture
def event_service() -> EventService:
    return EventService()


@pytest.fixture
def allocation_service() -> AllocationService:
    return AllocationService()


@pytest.fixture
def projection_service() -> ProjectionService:
    return ProjectionService()


@pytest.fixture
def data_service() -> DataService:
    return DataService()


@pytest.fixture
def sample_plan_dict() -> dict:
    return {
        "assets": [
            {"id": "a1", "name": "Savings", "type": "cash", "isQuantified": False, "value": 5000},
            {
                "id": "a2",
                "name": "World ETF",
                "type": "stock",
                "isQuantified": True,
                "quantity": 10,
                "unitPrice": 120,
                "costPrice": 100,
            },
            {"id": "a3", "name": "Flat", "type": "real_estate", "value": "150000"},
        ],
        "debts": [
            {
                "id": "d1",
                "name": "Mortgage",
                "monthlyPayment": 800,
                "insurance": 25,
                "rate": 3.5,
                "endDate": "2045-01-01",
            }
        ],
        "events": [
            {"id": "e1", "name": "Holidays", "amount": -1500, "date": "2025-07-01", "recurrence": "yearly"},
            {"id": "e2", "name": "Bonus", "amount": "2000", "date": "2025-03-10", "recurrence": "none"},
        ],
        "budget": {
            "incomeCategories": [{"id": "inc_salary", "name": "Salary"}],
            "expenseCategories": [
                {"id": "exp_rent", "name": "Rent"},
                {"id": "exp_food", "name": "Groceries"},
            ],
            "values": {"inc_salary": 3500, "exp_rent": "900", "exp_food": None},
        },
        "investmentGoal": 400,
        "targets": {"stock": 70, "cash": 30},
        "yields": {"stock": 7, "cash": 2, "real_estate": 2},
        "strategy": "smart",
    }
