"""Projection service for monthly wealth simulations.

This module contains the deterministic projection engine:
- Monthly fold over asset-class buckets and their cost basis
- Debt service and running principal from the closed-form annuity
- Budget cash flow plus recurring and one-off events
- Monthly investment through the selected allocation policy

Key features:
- Growth, then cash flow, then investment within each month
- Investment capped by available (non-negative) cash
- Worst-seen savings warning over the whole horizon
- No state shared between runs: each month yields fresh bucket vectors
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from wealthsim.config import get_config
from wealthsim.schemas import (
    ASSET_TYPES,
    Asset,
    AssetType,
    BudgetSnapshot,
    Debt,
    Event,
    Holding,
    MonthlyPlan,
    PlanLine,
    ProjectionPoint,
    ProjectionResult,
    ProjectionStats,
    SavingsWarning,
    SimulationError,
    Strategy,
    ValidationError,
    merge_warning,
)
from wealthsim.utils import (
    month_label,
    parse_date,
    safe_divide,
    to_number,
    validate_horizon,
)

from .allocation_service import AllocationService
from .debt_service import DebtService
from .event_service import EventService, EventWindow

logger = logging.getLogger(__name__)

CASH_INDEX = ASSET_TYPES.index(AssetType.CASH)


@dataclass(frozen=True)
class DebtTerm:
    """A debt reduced to the figures the monthly loop needs."""

    monthly_payment: float
    rate: float
    remaining_months: int
    monthly_cost: float


@dataclass(frozen=True)
class FoldState:
    """Bucket values and cost basis after a month, indexed like ASSET_TYPES."""

    values: np.ndarray
    basis: np.ndarray
    warning: SavingsWarning = SavingsWarning.NONE


@dataclass(frozen=True)
class MonthInputs:
    """Everything a month step reads; constant for a whole run."""

    terms: Tuple[DebtTerm, ...]
    windows: Tuple[EventWindow, ...]
    monthly_income: float
    monthly_expenses: float
    investment_goal: float
    growth: np.ndarray
    targets: Mapping
    strategy: Strategy
    today: date


class ProjectionService:
    """Service for running monthly wealth projections.

    This class exposes the projection entry point and the static
    recommended-plan view built on the same allocation policies.
    """

    def __init__(self):
        self.config = get_config()
        self.debt_service = DebtService()
        self.event_service = EventService()
        self.allocation_service = AllocationService()

    # ------------------------- Helpers ------------------------- #
    def asset_value(self, asset: Asset) -> float:
        return to_number(asset.value)

    def asset_cost_basis(self, asset: Asset) -> float:
        """Purchase cost of an asset; its value when no cost price is known."""
        quantity = to_number(asset.quantity)
        cost_price = to_number(asset.cost_price)
        if asset.is_quantified and cost_price and quantity:
            return quantity * cost_price
        return self.asset_value(asset)

    def bucket_vectors(self, assets: Iterable[Asset]) -> Tuple[np.ndarray, np.ndarray]:
        """Sum asset values and cost basis per asset type."""
        values = np.zeros(len(ASSET_TYPES), dtype=float)
        basis = np.zeros(len(ASSET_TYPES), dtype=float)
        for asset in assets or []:
            index = ASSET_TYPES.index(AssetType.parse(asset.type))
            values[index] += self.asset_value(asset)
            basis[index] += self.asset_cost_basis(asset)
        return values, basis

    def bucket_values(self, assets: Iterable[Asset]) -> Dict[AssetType, float]:
        values, _ = self.bucket_vectors(assets)
        return {t: float(v) for t, v in zip(ASSET_TYPES, values)}

    def holdings(self, assets: Iterable[Asset]) -> Tuple[Holding, ...]:
        return tuple(
            Holding(
                id=asset.id,
                name=asset.name,
                type=AssetType.parse(asset.type),
                value=self.asset_value(asset),
                quantity=to_number(asset.quantity),
                price=to_number(asset.unit_price),
                cost_price=to_number(asset.cost_price),
            )
            for asset in assets or []
        )

    def budget_totals(self, budget: Optional[BudgetSnapshot]) -> Tuple[float, float]:
        """Monthly income and expenses of a budget snapshot."""
        if budget is None:
            return 0.0, 0.0
        values = budget.values or {}
        income = sum(to_number(values.get(c.id)) for c in budget.income_categories)
        expenses = sum(to_number(values.get(c.id)) for c in budget.expense_categories)
        return float(income), float(expenses)

    def yield_vector(self, yields: Optional[Mapping]) -> np.ndarray:
        """Annual yield (%) per bucket; unlisted types do not grow."""
        normalized = {AssetType.parse(k): to_number(v) for k, v in (yields or {}).items()}
        return np.array([normalized.get(t, 0.0) for t in ASSET_TYPES], dtype=float)

    def debt_term(self, debt: Debt, today: date) -> DebtTerm:
        return DebtTerm(
            monthly_payment=to_number(debt.monthly_payment),
            rate=to_number(debt.rate),
            remaining_months=self.debt_service.remaining_months(debt.end_date, today),
            monthly_cost=self.debt_service.monthly_cost(debt),
        )

    def running_principal(self, terms: Sequence[DebtTerm], month_index: int) -> float:
        """Outstanding principal of all debts after ``month_index`` payments."""
        return float(
            sum(
                self.debt_service.principal(
                    t.monthly_payment, t.rate, max(0, t.remaining_months - month_index)
                )
                for t in terms
            )
        )

    def classify_shortfall(
        self, monthly_income: float, monthly_expenses: float, debt_payments: float, invest: float
    ) -> SavingsWarning:
        """Why a month that drew on savings could not fund its investment."""
        structural_surplus = monthly_income - monthly_expenses - debt_payments
        if structural_surplus < invest:
            if structural_surplus < 0:
                return SavingsWarning.STRUCTURAL_DEFICIT
            return SavingsWarning.STRUCTURAL_INVESTMENT
        return SavingsWarning.EVENT

    def _point(
        self,
        month_index: int,
        state: FoldState,
        debt: float,
        today: date,
        invested: float = 0.0,
    ) -> ProjectionPoint:
        assets = float(np.sum(state.values))
        return ProjectionPoint(
            month_index=month_index,
            month_label=month_label(today, month_index, self.config.month_label_format),
            assets=assets,
            debt=debt,
            net_worth=assets - debt,
            unrealized_gain=assets - float(np.sum(state.basis)),
            buckets={t: float(v) for t, v in zip(ASSET_TYPES, state.values)},
            invested=invested,
            savings_used=state.warning,
        )

    # --------------------- Monthly fold --------------------- #
    def step(self, state: FoldState, month_index: int, inputs: MonthInputs) -> Tuple[FoldState, float]:
        """
        Advance the projection by one month.

        Args:
            state: State at the end of the previous month
            month_index: Month being simulated (>= 1)
            inputs: Constant inputs of the run

        Returns:
            New state and the amount invested this month
        """
        debt_payments = sum(
            t.monthly_cost for t in inputs.terms if month_index < t.remaining_months
        )
        events_impact = self.event_service.impact_for_month(
            inputs.windows, month_index, inputs.today
        )
        net_cash_flow = (
            inputs.monthly_income
            - (inputs.monthly_expenses + debt_payments)
            + events_impact
        )

        # Growth first; cost basis is unchanged by growth
        values = state.values * inputs.growth
        basis = state.basis.copy()

        # Cash tracks its basis one-to-one
        values[CASH_INDEX] += net_cash_flow
        basis[CASH_INDEX] += net_cash_flow

        available = max(0.0, float(values[CASH_INDEX]))
        invest = min(available, inputs.investment_goal)
        if invest > 0:
            values[CASH_INDEX] -= invest
            basis[CASH_INDEX] -= invest

            # Holdings are left out: per-holding splits only feed the monthly plan
            allocation = self.allocation_service.allocate(
                invest,
                dict(zip(ASSET_TYPES, values)),
                inputs.targets,
                inputs.strategy,
            )
            for asset_type, amount in allocation.per_class.items():
                index = ASSET_TYPES.index(asset_type)
                values[index] += amount
                basis[index] += amount

            # Whatever the policy leaves unallocated stays in cash
            residual = invest - allocation.total
            if residual > 0:
                values[CASH_INDEX] += residual
                basis[CASH_INDEX] += residual

        warning = state.warning
        if net_cash_flow < invest:
            warning = merge_warning(
                warning,
                self.classify_shortfall(
                    inputs.monthly_income, inputs.monthly_expenses, debt_payments, invest
                ),
            )

        return FoldState(values=values, basis=basis, warning=warning), invest

    def simulate(
        self,
        assets: Sequence[Asset],
        debts: Sequence[Debt],
        events: Sequence[Event],
        budget: Optional[BudgetSnapshot],
        investment_goal: float,
        targets: Optional[Mapping],
        yields: Optional[Mapping],
        strategy,
        horizon_months: int,
        now: Optional[date] = None,
    ) -> ProjectionResult:
        """Project net worth month by month over ``horizon_months``.

        Month 0 is the current snapshot; months 1..horizon apply growth, cash
        flow and investment in that order.
        """
        horizon = validate_horizon(horizon_months, self.config.max_projection_months)
        strategy = Strategy.parse(strategy)
        today = parse_date(now) or date.today()

        try:
            values, basis = self.bucket_vectors(assets)
            terms = tuple(self.debt_term(d, today) for d in debts or [])
            monthly_income, monthly_expenses = self.budget_totals(budget)

            inputs = MonthInputs(
                terms=terms,
                windows=tuple(self.event_service.resolve(events, today)),
                monthly_income=monthly_income,
                monthly_expenses=monthly_expenses,
                investment_goal=max(0.0, to_number(investment_goal)),
                growth=1.0 + self.yield_vector(yields) / 100.0 / 12.0,
                targets=self.allocation_service.normalize(targets),
                strategy=strategy,
                today=today,
            )

            state = FoldState(values=values, basis=basis)
            series: List[ProjectionPoint] = [
                self._point(0, state, self.running_principal(terms, 0), today)
            ]
            for month_index in range(1, horizon + 1):
                state, invested = self.step(state, month_index, inputs)
                series.append(
                    self._point(
                        month_index,
                        state,
                        self.running_principal(terms, month_index),
                        today,
                        invested,
                    )
                )

            stats = self._stats(series, terms, monthly_income, monthly_expenses, state.warning)
        except (ValidationError, SimulationError):
            raise
        except Exception as e:
            raise SimulationError(f"Projection failed: {str(e)}") from e

        logger.debug(
            "Projected %d months with %s: net worth %.2f -> %.2f, savings used: %s",
            horizon,
            strategy.value,
            series[0].net_worth,
            series[-1].net_worth,
            state.warning.label,
        )
        return ProjectionResult(series=series, stats=stats)

    def _stats(
        self,
        series: List[ProjectionPoint],
        terms: Sequence[DebtTerm],
        monthly_income: float,
        monthly_expenses: float,
        warning: SavingsWarning,
    ) -> ProjectionStats:
        current = series[0]
        total_interest = sum(
            t.monthly_payment * t.remaining_months
            - self.debt_service.principal(t.monthly_payment, t.rate, t.remaining_months)
            for t in terms
        )
        monthly_surplus = monthly_income - monthly_expenses - sum(t.monthly_cost for t in terms)
        savings_rate = safe_divide(monthly_surplus, monthly_income) * 100.0 if monthly_income > 0 else 0.0

        return ProjectionStats(
            net_worth=current.net_worth,
            total_assets=current.assets,
            total_debt=current.debt,
            total_interest=float(total_interest),
            monthly_surplus=float(monthly_surplus),
            savings_rate=float(savings_rate),
            final_buckets=dict(series[-1].buckets),
            monthly_income=monthly_income,
            monthly_expenses=monthly_expenses,
            savings_used=warning,
        )

    # --------------------- Static views --------------------- #
    def recommend_monthly_plan(
        self,
        assets: Sequence[Asset],
        investment_goal: float,
        targets: Optional[Mapping],
        strategy,
    ) -> MonthlyPlan:
        """Split the monthly investment goal against today's balances."""
        strategy = Strategy.parse(strategy)
        goal = max(0.0, to_number(investment_goal))
        current = self.bucket_values(assets)
        targets = self.allocation_service.normalize(targets)

        allocation = self.allocation_service.allocate(
            goal, current, targets, strategy, self.holdings(assets)
        )
        target_percents = self.allocation_service.target_percents(targets)
        investable_total = sum(current[t] for t in self.allocation_service.asset_types)
        per_holding = allocation.per_holding or {}

        lines = [
            PlanLine(
                asset_type=asset_type,
                amount=amount,
                reason=allocation.reasons[asset_type],
                target_percent=target_percents[asset_type],
                current_value=current[asset_type],
                current_percent=safe_divide(current[asset_type], investable_total) * 100.0,
                holdings=per_holding.get(asset_type, []),
            )
            for asset_type, amount in allocation.per_class.items()
        ]
        return MonthlyPlan(strategy=strategy, investment_goal=goal, lines=lines)

    def current_allocation(self, assets: Sequence[Asset]) -> pd.DataFrame:
        """Value and percent share of every asset type."""
        current = self.bucket_values(assets)
        total = sum(current.values())
        frame = pd.DataFrame(
            {
                "value": [current[t] for t in ASSET_TYPES],
                "percent": [safe_divide(current[t], total) * 100.0 for t in ASSET_TYPES],
            },
            index=[t.value for t in ASSET_TYPES],
        )
        frame.index.name = "type"
        return frame
