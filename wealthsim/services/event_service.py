"""Recurring event resolution service.

Turns a catalog of signed cash events into the cash impact of a given
simulated month. Month 0 is the current calendar month.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

import numpy as np

from wealthsim.schemas import Event, Recurrence
from wealthsim.utils import add_months, month_start, months_between, parse_date, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventWindow:
    """An event with its dates parsed and its start month resolved."""

    name: str
    amount: float
    recurrence: Recurrence
    start_date: date
    start_index: int
    interval: int
    end_date: Optional[date]


class EventService:
    """Service for resolving events into monthly cash impacts."""

    def __init__(self):
        pass

    def resolve(self, events: Iterable[Event], today: date) -> List[EventWindow]:
        """Parse event dates once; events without a valid date are dropped."""
        windows = []
        for event in events or []:
            start_date = parse_date(event.date)
            if start_date is None:
                logger.warning("Event %r has no valid date and is ignored", event.name)
                continue
            windows.append(
                EventWindow(
                    name=event.name,
                    amount=to_number(event.amount),
                    recurrence=Recurrence.parse(event.recurrence),
                    start_date=start_date,
                    start_index=months_between(today, start_date),
                    interval=max(1, int(to_number(event.interval, default=1))),
                    end_date=parse_date(event.end_date),
                )
            )
        return windows

    def occurrences(self, window: EventWindow, month_index: int, today: date) -> int:
        """Number of times an event hits month ``month_index``."""
        elapsed = month_index - window.start_index
        if elapsed < 0:
            return 0

        if window.recurrence is Recurrence.NONE:
            return 1 if elapsed == 0 else 0
        if window.recurrence is Recurrence.WEEKLY:
            return self._weekly_occurrences(window, month_index, today)

        if window.recurrence is Recurrence.MONTHLY:
            hit = True
        elif window.recurrence is Recurrence.YEARLY:
            hit = elapsed % 12 == 0
        else:
            hit = elapsed % window.interval == 0

        if hit and window.end_date is not None:
            hit = add_months(window.start_date, elapsed) <= window.end_date
        return 1 if hit else 0

    def _weekly_occurrences(self, window: EventWindow, month_index: int, today: date) -> int:
        first_day = month_start(today, month_index)
        last_day = month_start(today, month_index + 1) - timedelta(days=1)
        if window.end_date is not None:
            last_day = min(last_day, window.end_date)
        if last_day < window.start_date:
            return 0

        # Occurrences fall on start_date + 7k, k >= 0
        first_k = max(0, -(-(first_day - window.start_date).days // 7))
        last_k = (last_day - window.start_date).days // 7
        return max(0, last_k - first_k + 1)

    def impact_for_month(self, windows: Iterable[EventWindow], month_index: int, today: date) -> float:
        """Signed cash impact of resolved events on one month."""
        return float(
            sum(window.amount * self.occurrences(window, month_index, today) for window in windows)
        )

    def monthly_impact(self, events: Iterable[Event], month_index: int, today: date) -> float:
        """Signed cash impact of raw events on one month."""
        return self.impact_for_month(self.resolve(events, today), month_index, today)

    def impact_series(self, events: Iterable[Event], horizon_months: int, today: date) -> np.ndarray:
        """Cash impact of every month from 0 to ``horizon_months`` inclusive."""
        windows = self.resolve(events, today)
        return np.array(
            [self.impact_for_month(windows, i, today) for i in range(horizon_months + 1)],
            dtype=float,
        )
