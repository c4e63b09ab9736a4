"""Wealth projection and allocation engine for a personal-finance dashboard."""

from wealthsim.schemas import (
    Asset,
    AssetType,
    BudgetCategory,
    BudgetSnapshot,
    Debt,
    Event,
    ProjectionResult,
    Recurrence,
    SavingsWarning,
    Strategy,
)
from wealthsim.services import (
    AllocationService,
    DataService,
    DebtService,
    EventService,
    ProjectionService,
    SimulationController,
)

__version__ = "0.1.0"

__all__ = [
    "AllocationService",
    "Asset",
    "AssetType",
    "BudgetCategory",
    "BudgetSnapshot",
    "DataService",
    "Debt",
    "DebtService",
    "Event",
    "EventService",
    "ProjectionResult",
    "ProjectionService",
    "Recurrence",
    "SavingsWarning",
    "SimulationController",
    "Strategy",
]
