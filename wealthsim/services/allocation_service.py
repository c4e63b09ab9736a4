"""Allocation policy service.

This module decides how an investable amount is split:
- Across asset classes, under one of three policies
- Across the individual holdings of a class (conviction-weighted policy)

Key features:
- Fixed split (dca): target weights, independent of current balances
- Gap-proportional rebalancing (smart): only underweight classes are funded
- Conviction-weighted (active): smart class split, then holdings that lag the
  class leader get more, linearly in the performance gap
- Target weights normalized by max(1, sum of targets), so an all-zero target
  map never divides by zero
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from wealthsim.config import get_config
from wealthsim.schemas import (
    AllocationResult,
    AssetType,
    Holding,
    HoldingAllocation,
    Strategy,
)
from wealthsim.utils import safe_divide, to_number

logger = logging.getLogger(__name__)


class AllocationPolicy:
    """Base class: splits an amount across asset classes."""

    strategy: Strategy = None

    def class_amounts(
        self,
        amount: float,
        current: np.ndarray,
        targets: np.ndarray,
        total_target: float,
    ) -> Tuple[np.ndarray, List[str]]:
        """Return per-class amounts and reasons, aligned with ``current``."""
        raise NotImplementedError

    def holding_breakdown(
        self,
        amounts: Dict[AssetType, float],
        holdings: Sequence[Holding],
        min_allocation: float,
    ) -> Optional[Dict[AssetType, List[HoldingAllocation]]]:
        return None


class FixedSplitPolicy(AllocationPolicy):
    """Dollar-cost averaging: a fixed split by target weight."""

    strategy = Strategy.DCA

    def class_amounts(self, amount, current, targets, total_target):
        amounts = amount * targets / total_target
        return amounts, ["fixed split"] * len(amounts)


class GapRebalancePolicy(AllocationPolicy):
    """Funds underweight classes in proportion to their gap to target."""

    strategy = Strategy.SMART

    def class_amounts(self, amount, current, targets, total_target):
        projected_total = float(np.sum(current)) + amount
        gaps = projected_total * targets / total_target - current

        positive_gaps = np.where(gaps > 0, gaps, 0.0)
        positive_total = float(np.sum(positive_gaps))
        if positive_total > 0:
            amounts = amount * positive_gaps / positive_total
        else:
            # Fully balanced or everything over target
            amounts = np.zeros_like(current)

        reasons = ["underweight" if gap > 0 else "overweight" for gap in gaps]
        return amounts, reasons


class ConvictionPolicy(GapRebalancePolicy):
    """Gap rebalancing across classes, then favours laggards within a class."""

    strategy = Strategy.ACTIVE

    def holding_performance(self, holding: Holding) -> float:
        """Unrealized return of a holding, 0 without a cost basis."""
        quantity = to_number(holding.quantity)
        cost = quantity * to_number(holding.cost_price)
        if cost <= 0:
            return 0.0
        return (quantity * to_number(holding.price) - cost) / cost

    def split_class(
        self, amount: float, holdings: Sequence[Holding], min_allocation: float
    ) -> List[HoldingAllocation]:
        """
        Split one class's amount across its holdings.

        Weight = value share * (best performance - performance). The gap is
        linear, not squared, so deeply negative positions are not over-bought.
        Falls back to an equal split when every weight is zero.
        """
        if amount <= 0 or not holdings:
            return []

        # Negative positions get no share of the class
        values = np.maximum([to_number(h.value) for h in holdings], 0.0)
        perf = np.array([self.holding_performance(h) for h in holdings], dtype=float)

        class_total = float(np.sum(values))
        if class_total > 0:
            shares = values / class_total
        else:
            shares = np.zeros_like(values)

        weights = shares * (perf.max() - perf)
        weight_total = float(np.sum(weights))
        if weight_total > 0:
            allocations = amount * weights / weight_total
        else:
            allocations = np.full(len(holdings), amount / len(holdings))

        result = [
            HoldingAllocation(
                holding_id=h.id,
                name=h.name,
                amount=float(allocated),
                performance=float(p),
            )
            for h, allocated, p in zip(holdings, allocations, perf)
            if allocated >= min_allocation
        ]
        result.sort(key=lambda item: item.amount, reverse=True)
        return result

    def holding_breakdown(self, amounts, holdings, min_allocation):
        by_type = defaultdict(list)
        for holding in holdings:
            by_type[AssetType.parse(holding.type)].append(holding)

        return {
            asset_type: self.split_class(amount, by_type.get(asset_type, []), min_allocation)
            for asset_type, amount in amounts.items()
            if amount > 0
        }


POLICIES: Dict[Strategy, AllocationPolicy] = {
    policy.strategy: policy
    for policy in (FixedSplitPolicy(), GapRebalancePolicy(), ConvictionPolicy())
}


def get_policy(strategy) -> AllocationPolicy:
    """Policy implementing ``strategy`` (a Strategy or its name)."""
    return POLICIES[Strategy.parse(strategy)]


class AllocationService:
    """Service for splitting investable amounts across asset classes."""

    def __init__(self):
        self.config = get_config()

    @property
    def asset_types(self) -> Tuple[AssetType, ...]:
        """Classes new savings can be invested in."""
        return tuple(AssetType.parse(t) for t in self.config.investable_asset_types)

    def normalize(self, values: Optional[Mapping]) -> Dict[AssetType, float]:
        """Re-key a raw mapping by AssetType, summing keys of the same class."""
        normalized: Dict[AssetType, float] = defaultdict(float)
        for key, value in (values or {}).items():
            normalized[AssetType.parse(key)] += to_number(value)
        return dict(normalized)

    def vector(self, values: Optional[Mapping], floor_zero: bool = False) -> np.ndarray:
        """Align a type-keyed mapping with ``asset_types``; missing keys are 0."""
        normalized = self.normalize(values)
        vec = np.array([normalized.get(t, 0.0) for t in self.asset_types], dtype=float)
        if floor_zero:
            vec = np.maximum(vec, 0.0)
        return vec

    def total_target(self, targets: Optional[Mapping]) -> float:
        """Normalization base for target weights, at least 1."""
        return max(1.0, float(np.sum(self.vector(targets, floor_zero=True))))

    def target_percents(self, targets: Optional[Mapping]) -> Dict[AssetType, float]:
        """Effective target share (0-100) of every investable class."""
        vec = self.vector(targets, floor_zero=True)
        total = self.total_target(targets)
        return {t: float(v / total * 100.0) for t, v in zip(self.asset_types, vec)}

    def allocate(
        self,
        amount: float,
        current_values: Optional[Mapping],
        targets: Optional[Mapping],
        strategy,
        holdings: Optional[Iterable[Holding]] = None,
    ) -> AllocationResult:
        """
        Split ``amount`` across the investable asset classes.

        Args:
            amount: Amount to invest this month (negative treated as 0)
            current_values: Current value per asset type
            targets: Target percent per asset type (need not sum to 100)
            strategy: 'dca', 'smart' or 'active'
            holdings: Individual positions, used by the 'active' policy;
                no per-holding breakdown is built without them

        Returns:
            AllocationResult with per-class amounts and reasons, plus the
            per-holding breakdown for 'active'
        """
        policy = get_policy(strategy)
        amount = max(0.0, to_number(amount))

        current = self.vector(current_values)
        target_vec = self.vector(targets, floor_zero=True)
        total_target = max(1.0, float(np.sum(target_vec)))

        amounts, reasons = policy.class_amounts(amount, current, target_vec, total_target)
        per_class = {t: float(a) for t, a in zip(self.asset_types, amounts)}

        per_holding = None
        if holdings is not None:
            per_holding = policy.holding_breakdown(
                per_class, list(holdings), self.config.min_holding_allocation
            )

        logger.debug(
            "Allocated %.2f with %s: %s (%.0f%% of targets set)",
            amount,
            policy.strategy.value,
            {t.value: round(a, 2) for t, a in per_class.items()},
            safe_divide(float(np.sum(target_vec)), total_target) * 100.0,
        )
        return AllocationResult(
            per_class=per_class,
            reasons=dict(zip(self.asset_types, reasons)),
            per_holding=per_holding,
        )
