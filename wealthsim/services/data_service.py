"""Data service for loading dashboard data into engine inputs.

This module converts the dashboard's persisted plain data into typed inputs:
- Assets, debts and future events
- Budget categories and their monthly values
- Investment goal, target weights, yields and strategy

Key features:
- camelCase keys of the stored data accepted as-is
- Missing or malformed numbers coerced to 0
- Targets, yields and strategy fall back to the configured defaults
"""

from typing import Any, Dict, List, Mapping, Optional

from wealthsim.config import get_config
from wealthsim.schemas import (
    Asset,
    AssetType,
    BudgetCategory,
    BudgetSnapshot,
    DataError,
    Debt,
    Event,
    PlanInputs,
    Recurrence,
    Strategy,
)
from wealthsim.utils import to_number


class DataService:
    """Service for converting stored dashboard data into engine inputs."""

    def __init__(self):
        self.config = get_config()

    def _records(self, data: Mapping, key: str) -> List[Mapping]:
        records = data.get(key) or []
        if not isinstance(records, list):
            raise DataError(f"'{key}' must be a list, got {type(records).__name__}")
        for record in records:
            if not isinstance(record, Mapping):
                raise DataError(f"Every entry of '{key}' must be an object")
        return records

    def _optional_number(self, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        return to_number(value)

    def parse_asset(self, record: Mapping) -> Asset:
        """Build an asset; quantified assets are worth quantity x unit price."""
        is_quantified = bool(record.get("isQuantified", False))
        quantity = self._optional_number(record.get("quantity"))
        unit_price = self._optional_number(record.get("unitPrice"))

        if is_quantified and unit_price is not None:
            value = to_number(quantity) * unit_price
        else:
            value = to_number(record.get("value", record.get("totalValue")))

        return Asset(
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
            type=AssetType.parse(record.get("type")),
            value=value,
            is_quantified=is_quantified,
            quantity=quantity,
            unit_price=unit_price,
            cost_price=self._optional_number(record.get("costPrice")),
        )

    def parse_debt(self, record: Mapping) -> Debt:
        return Debt(
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
            monthly_payment=to_number(record.get("monthlyPayment")),
            rate=to_number(record.get("rate")),
            end_date=record.get("endDate"),
            insurance=to_number(record.get("insurance")),
        )

    def parse_event(self, record: Mapping) -> Event:
        return Event(
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
            amount=to_number(record.get("amount")),
            date=record.get("date"),
            recurrence=Recurrence.parse(record.get("recurrence")),
            interval=max(1, int(to_number(record.get("interval"), default=1))),
            end_date=record.get("endDate"),
        )

    def parse_budget(self, record: Optional[Mapping]) -> BudgetSnapshot:
        record = record or {}
        if not isinstance(record, Mapping):
            raise DataError("'budget' must be an object")

        def categories(key: str) -> List[BudgetCategory]:
            return [
                BudgetCategory(id=str(c.get("id", "")), name=str(c.get("name", "")))
                for c in self._records(record, key)
            ]

        values = record.get("values") or {}
        if not isinstance(values, Mapping):
            raise DataError("'budget.values' must be an object")

        return BudgetSnapshot(
            income_categories=categories("incomeCategories"),
            expense_categories=categories("expenseCategories"),
            values={str(k): to_number(v) for k, v in values.items()},
        )

    def parse_weights(self, record: Optional[Mapping], default: Dict[str, float]) -> Dict[AssetType, float]:
        """Type-keyed percentages; unknown types fold into 'other'."""
        if record is None:
            record = default
        if not isinstance(record, Mapping):
            raise DataError("Targets and yields must be objects keyed by asset type")
        weights: Dict[AssetType, float] = {}
        for key, value in record.items():
            asset_type = AssetType.parse(key)
            weights[asset_type] = weights.get(asset_type, 0.0) + to_number(value)
        return weights

    def load_plan(self, data: Mapping) -> PlanInputs:
        """
        Convert the dashboard's stored data into projection inputs.

        Args:
            data: Plain dictionary with 'assets', 'debts', 'events', 'budget'
                and optionally 'investmentGoal', 'targets', 'yields',
                'strategy' (top-level or under 'settings')

        Returns:
            PlanInputs ready for ProjectionService.simulate
        """
        if not isinstance(data, Mapping):
            raise DataError(f"Plan data must be an object, got {type(data).__name__}")

        settings = data.get("settings") or {}
        if not isinstance(settings, Mapping):
            raise DataError("'settings' must be an object")

        def setting(key: str, default: Any = None) -> Any:
            if key in data:
                return data[key]
            return settings.get(key, default)

        return PlanInputs(
            assets=[self.parse_asset(r) for r in self._records(data, "assets")],
            debts=[self.parse_debt(r) for r in self._records(data, "debts")],
            events=[self.parse_event(r) for r in self._records(data, "events")],
            budget=self.parse_budget(data.get("budget")),
            investment_goal=max(0.0, to_number(setting("investmentGoal"))),
            targets=self.parse_weights(setting("targets"), self.config.default_targets),
            yields=self.parse_weights(setting("yields"), self.config.default_yields),
            strategy=Strategy.parse(setting("strategy") or self.config.default_strategy),
        )
