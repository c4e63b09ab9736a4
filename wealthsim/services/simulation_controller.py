"""Simulation controller for orchestrating projection runs and caching."""

import hashlib
import json
import logging
from datetime import date
from typing import Any, Mapping, Optional

from wealthsim.config import get_config
from wealthsim.schemas import ProjectionResult

from .data_service import DataService
from .projection_service import ProjectionService

logger = logging.getLogger(__name__)


class SimulationController:
    """Controller for managing projection execution and caching.

    Keeps the last result and the hash of the inputs that produced it, so a
    caller can recompute on every input change and reuse the result otherwise.
    """

    def __init__(
        self,
        data_service: Optional[DataService] = None,
        projection_service: Optional[ProjectionService] = None,
    ):
        self.config = get_config()
        self.data_service = data_service or DataService()
        self.projection_service = projection_service or ProjectionService()
        self.last_inputs_hash: Optional[str] = None
        self.last_result: Optional[ProjectionResult] = None

    def calculate_input_hash(self, inputs: Mapping[str, Any]) -> str:
        """Calculate hash of inputs for change detection.

        Args:
            inputs: Plain dictionary of inputs

        Returns:
            MD5 hash string of inputs
        """
        return hashlib.md5(
            json.dumps(inputs, sort_keys=True, default=str).encode()
        ).hexdigest()

    def detect_input_changes(self, inputs_hash: str) -> bool:
        """Detect if inputs have changed and drop the stale result if so.

        Args:
            inputs_hash: Current inputs hash

        Returns:
            True if inputs changed, False otherwise
        """
        inputs_changed = self.last_inputs_hash != inputs_hash
        if inputs_changed:
            self.last_result = None
        self.last_inputs_hash = inputs_hash
        return inputs_changed

    def get_cached_result(self, inputs_changed: bool) -> Optional[ProjectionResult]:
        """Get cached projection result if inputs haven't changed."""
        if inputs_changed:
            return None
        return self.last_result

    def run_projection(
        self,
        data: Mapping[str, Any],
        horizon_months: Optional[int] = None,
        now: Optional[date] = None,
    ) -> ProjectionResult:
        """Execute the full projection workflow for stored dashboard data.

        Args:
            data: Plain dashboard data (see DataService.load_plan)
            horizon_months: Months to project, defaults to the configured value
            now: Reference date, defaults to today

        Returns:
            ProjectionResult, reused from the previous call when nothing changed
        """
        if horizon_months is None:
            horizon_months = self.config.default_projection_months
        now = now or date.today()

        inputs_hash = self.calculate_input_hash(
            {"data": data, "horizon_months": horizon_months, "now": now.isoformat()}
        )
        inputs_changed = self.detect_input_changes(inputs_hash)
        cached = self.get_cached_result(inputs_changed)
        if cached is not None:
            logger.debug("Inputs unchanged, reusing projection %s", inputs_hash)
            return cached

        plan = self.data_service.load_plan(data)
        logger.info(
            "Running %d-month projection (%s, %d assets, %d debts, %d events)",
            horizon_months,
            plan.strategy.value,
            len(plan.assets),
            len(plan.debts),
            len(plan.events),
        )
        result = self.projection_service.simulate(
            plan.assets,
            plan.debts,
            plan.events,
            plan.budget,
            plan.investment_goal,
            plan.targets,
            plan.yields,
            plan.strategy,
            horizon_months,
            now,
        )
        self.last_result = result
        return result
