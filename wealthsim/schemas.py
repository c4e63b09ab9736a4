"""Data models and type definitions for the wealth projection engine.

This module defines all data structures used throughout the engine:
- Portfolio inputs (assets, debts, events, budget)
- Allocation strategies and their results
- Projection points, statistics and results
- Custom exception classes

Key features:
- Closed enumerations for asset types, recurrences and strategies
- Ordered savings warning with an upgrade-only merge
- Plain-data conversion of results for presentation layers
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Custom exception for validation errors."""

    pass


class DataError(Exception):
    """Custom exception for data-related errors."""

    pass


class SimulationError(Exception):
    """Custom exception for simulation errors."""

    pass


class AssetType(str, Enum):
    """Asset classes tracked as simulation buckets."""

    STOCK = "stock"
    CRYPTO = "crypto"
    METAL = "metal"
    CASH = "cash"
    REAL_ESTATE = "real_estate"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "AssetType":
        """Map a raw type to an asset class, bucketing unknown types into OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown asset type %r, counted as 'other'", value)
            return cls.OTHER


# Fixed bucket order used for every vector in the simulation
ASSET_TYPES = tuple(AssetType)


class Recurrence(str, Enum):
    """How often an event repeats."""

    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "Recurrence":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "none").strip().lower())
        except ValueError:
            logger.warning("Unknown recurrence %r, treated as one-time", value)
            return cls.NONE


class Strategy(str, Enum):
    """Allocation policy used to invest monthly savings."""

    DCA = "dca"
    SMART = "smart"
    ACTIVE = "active"

    @classmethod
    def parse(cls, value: Any) -> "Strategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Strategy must be one of {[s.value for s in cls]}, got {value!r}"
            )


class SavingsWarning(IntEnum):
    """Worst savings draw-down seen over a projection, by increasing severity."""

    NONE = 0
    EVENT = 1
    STRUCTURAL_INVESTMENT = 2
    STRUCTURAL_DEFICIT = 3

    @property
    def label(self) -> Union[bool, str]:
        """Dashboard label: False when no savings were used."""
        if self is SavingsWarning.NONE:
            return False
        return self.name.lower()


def merge_warning(current: SavingsWarning, candidate: SavingsWarning) -> SavingsWarning:
    """Upgrade-only merge: a warning is never replaced by a weaker one."""
    return max(current, candidate)


@dataclass(frozen=True)
class Asset:
    """A single holding in the portfolio."""

    id: str
    type: AssetType
    value: float
    name: str = ""
    is_quantified: bool = False
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    cost_price: Optional[float] = None


@dataclass(frozen=True)
class Holding:
    """Individual position considered by the conviction-weighted policy."""

    id: str
    name: str
    type: AssetType
    value: float
    quantity: float = 0.0
    price: float = 0.0
    cost_price: float = 0.0


@dataclass(frozen=True)
class Debt:
    """Amortizing loan paid monthly until its end date."""

    id: str
    name: str
    monthly_payment: float
    rate: float  # annual %
    end_date: Optional[Union[str, date]]
    insurance: float = 0.0


@dataclass(frozen=True)
class Event:
    """Signed cash event: positive amounts are income, negative are expenses."""

    id: str
    name: str
    amount: float
    date: Optional[Union[str, date]]
    recurrence: Recurrence = Recurrence.NONE
    interval: int = 1  # months, for custom recurrence
    end_date: Optional[Union[str, date]] = None


@dataclass
class BudgetCategory:
    id: str
    name: str = ""


@dataclass
class BudgetSnapshot:
    """Monthly budget: category lists plus a value per category id."""

    income_categories: List[BudgetCategory] = field(default_factory=list)
    expense_categories: List[BudgetCategory] = field(default_factory=list)
    values: Dict[str, float] = field(default_factory=dict)


@dataclass
class PlanInputs:
    """Everything a projection needs, as loaded from the dashboard's data."""

    assets: List[Asset] = field(default_factory=list)
    debts: List[Debt] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    budget: BudgetSnapshot = field(default_factory=BudgetSnapshot)
    investment_goal: float = 0.0
    targets: Dict[AssetType, float] = field(default_factory=dict)
    yields: Dict[AssetType, float] = field(default_factory=dict)
    strategy: Strategy = Strategy.DCA


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    payment: float
    interest: float
    principal: float
    balance: float


@dataclass
class DebtSummary:
    """Derived figures for one debt as of a given date."""

    debt_id: str
    name: str
    remaining_months: int
    principal: float
    monthly_cost: float
    total_cost: float
    total_interest: float
    has_valid_end_date: bool
    schedule: List[AmortizationRow] = field(default_factory=list)


@dataclass(frozen=True)
class HoldingAllocation:
    holding_id: str
    name: str
    amount: float
    performance: float


@dataclass
class AllocationResult:
    """Per-class amounts to invest, with optional per-holding breakdown."""

    per_class: Dict[AssetType, float]
    reasons: Dict[AssetType, str]
    per_holding: Optional[Dict[AssetType, List[HoldingAllocation]]] = None

    @property
    def total(self) -> float:
        return float(sum(self.per_class.values()))


@dataclass
class PlanLine:
    """One asset class of the recommended monthly plan."""

    asset_type: AssetType
    amount: float
    reason: str
    target_percent: float
    current_value: float
    current_percent: float
    holdings: List[HoldingAllocation] = field(default_factory=list)


@dataclass
class MonthlyPlan:
    strategy: Strategy
    investment_goal: float
    lines: List[PlanLine]

    @property
    def total(self) -> float:
        return float(sum(line.amount for line in self.lines))


@dataclass
class ProjectionPoint:
    """One simulated month."""

    month_index: int
    month_label: str
    assets: float
    debt: float
    net_worth: float
    unrealized_gain: float
    buckets: Dict[AssetType, float]
    invested: float = 0.0
    savings_used: SavingsWarning = SavingsWarning.NONE

    def to_dict(self) -> Dict[str, Any]:
        row = {
            "name": self.month_label,
            "Assets": self.assets,
            "Debt": self.debt,
            "NetWorth": self.net_worth,
            "UnrealizedGain": self.unrealized_gain,
        }
        row.update({asset_type.value: value for asset_type, value in self.buckets.items()})
        return row


@dataclass
class ProjectionStats:
    """Summary statistics of a projection run."""

    net_worth: float
    total_assets: float
    total_debt: float
    total_interest: float
    monthly_surplus: float
    savings_rate: float  # percent of income
    final_buckets: Dict[AssetType, float]
    monthly_income: float
    monthly_expenses: float
    savings_used: SavingsWarning = SavingsWarning.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "netWorth": self.net_worth,
            "totalAssets": self.total_assets,
            "totalDebt": self.total_debt,
            "totalInterest": self.total_interest,
            "monthlySurplus": self.monthly_surplus,
            "savingsRate": self.savings_rate,
            "finalBuckets": {k.value: v for k, v in self.final_buckets.items()},
            "monthlyIncome": self.monthly_income,
            "monthlyExpenses": self.monthly_expenses,
            "savingsUsed": self.savings_used.label,
        }


@dataclass
class ProjectionResult:
    """Results from a projection run."""

    series: List[ProjectionPoint]
    stats: ProjectionStats

    @property
    def horizon_months(self) -> int:
        return len(self.series) - 1

    def net_worth_path(self) -> np.ndarray:
        return np.array([point.net_worth for point in self.series], dtype=float)

    def to_frame(self) -> pd.DataFrame:
        """Tabular view of the series, one row per month."""
        frame = pd.DataFrame([point.to_dict() for point in self.series])
        frame["invested"] = [point.invested for point in self.series]
        frame["savingsUsed"] = [point.savings_used.label for point in self.series]
        return frame.set_index("name")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [point.to_dict() for point in self.series],
            "stats": self.stats.to_dict(),
        }
