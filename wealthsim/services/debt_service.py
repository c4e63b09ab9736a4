"""Debt amortization service.

This module handles all loan-related mathematics:
- Remaining term of a debt from its end date
- Outstanding principal as the present value of the remaining payments
- Month-by-month amortization schedules
- Per-debt summaries (total cost, total interest)

Key features:
- Closed-form principal, so any month's balance is computed directly
- Zero-rate loans handled as straight-line repayment
- Invalid or missing end dates degrade to a zero remaining term
"""

from datetime import date
from typing import Any, List, Optional

import numpy as np
import pandas as pd

from wealthsim.schemas import AmortizationRow, Debt, DebtSummary
from wealthsim.utils import months_between, parse_date, to_number


class DebtService:
    """Service for debt amortization operations."""

    def __init__(self):
        pass

    def remaining_months(self, end_date: Any, now: date) -> int:
        """Whole months left until ``end_date``, never negative.

        Args:
            end_date: Loan end date (date, datetime or ISO string)
            now: Reference date

        Returns:
            Remaining months, 0 for past, missing or invalid dates
        """
        end = parse_date(end_date)
        if end is None:
            return 0
        return max(0, months_between(now, end))

    def monthly_rate(self, annual_rate_pct: float) -> float:
        return to_number(annual_rate_pct) / 100.0 / 12.0

    def principal(self, monthly_payment: float, annual_rate_pct: float, months: int) -> float:
        """Present value of the remaining payments (ordinary annuity).

        PV = PMT * (1 - (1 + r)^-n) / r, with r the monthly rate. A zero rate
        is straight-line: PMT * n.
        """
        payment = to_number(monthly_payment)
        months = int(to_number(months))
        if months <= 0:
            return 0.0
        rate = to_number(annual_rate_pct)
        if rate == 0:
            return payment * months

        r = self.monthly_rate(rate)
        return float(payment * (1.0 - np.power(1.0 + r, -months)) / r)

    def schedule(
        self,
        principal: float,
        annual_rate_pct: float,
        months: int,
        monthly_payment: float,
    ) -> List[AmortizationRow]:
        """
        Build the amortization schedule of a loan.

        Each month's interest accrues on the opening balance and the rest of
        the payment repays principal. The balance is clamped at zero when the
        payment overstates what is owed.

        Args:
            principal: Opening balance
            annual_rate_pct: Annual interest rate in percent
            months: Number of rows to produce
            monthly_payment: Payment made every month

        Returns:
            Exactly ``months`` schedule rows
        """
        balance = to_number(principal)
        payment = to_number(monthly_payment)
        r = self.monthly_rate(annual_rate_pct)

        rows = []
        for month in range(1, int(to_number(months)) + 1):
            interest = balance * r
            principal_paid = payment - interest
            balance = max(0.0, balance - principal_paid)
            rows.append(
                AmortizationRow(
                    month=month,
                    payment=payment,
                    interest=interest,
                    principal=principal_paid,
                    balance=balance,
                )
            )
        return rows

    def schedule_frame(self, rows: List[AmortizationRow]) -> pd.DataFrame:
        """Schedule as a table indexed by month."""
        frame = pd.DataFrame(
            [(row.month, row.payment, row.interest, row.principal, row.balance) for row in rows],
            columns=["month", "payment", "interest", "principal", "balance"],
        )
        return frame.set_index("month")

    def monthly_cost(self, debt: Debt) -> float:
        """Payment plus insurance due every month."""
        return to_number(debt.monthly_payment) + to_number(debt.insurance)

    def summarize(self, debt: Debt, now: date, include_schedule: bool = True) -> DebtSummary:
        """Compute the outstanding figures of a debt as of ``now``."""
        months = self.remaining_months(debt.end_date, now)
        payment = to_number(debt.monthly_payment)
        principal = self.principal(payment, debt.rate, months)
        monthly_cost = self.monthly_cost(debt)

        rows: Optional[List[AmortizationRow]] = None
        if include_schedule:
            rows = self.schedule(principal, debt.rate, months, payment)

        return DebtSummary(
            debt_id=debt.id,
            name=debt.name,
            remaining_months=months,
            principal=principal,
            monthly_cost=monthly_cost,
            total_cost=monthly_cost * months,
            total_interest=payment * months - principal,
            has_valid_end_date=parse_date(debt.end_date) is not None,
            schedule=rows or [],
        )
