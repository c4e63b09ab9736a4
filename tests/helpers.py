from typing import Dict, Optional

from wealthsim.schemas import (
    Asset,
    AssetType,
    BudgetCategory,
    BudgetSnapshot,
    Debt,
    Event,
    Recurrence,
)


def make_asset(
    asset_id: str,
    type: str,
    value: float,
    quantity: Optional[float] = None,
    unit_price: Optional[float] = None,
    cost_price: Optional[float] = None,
) -> Asset:
    return Asset(
        id=asset_id,
        name=asset_id,
        type=AssetType.parse(type),
        value=value,
        is_quantified=quantity is not None,
        quantity=quantity,
        unit_price=unit_price,
        cost_price=cost_price,
    )


def make_budget(income: float = 0.0, expenses: float = 0.0) -> BudgetSnapshot:
    return BudgetSnapshot(
        income_categories=[BudgetCategory(id="inc_salary", name="Salary")],
        expense_categories=[BudgetCategory(id="exp_rent", name="Rent")],
        values={"inc_salary": income, "exp_rent": expenses},
    )


def make_debt(end_date, monthly_payment: float, rate: float = 0.0, insurance: float = 0.0) -> Debt:
    return Debt(
        id="d1",
        name="Loan",
        monthly_payment=monthly_payment,
        rate=rate,
        end_date=end_date,
        insurance=insurance,
    )


def make_event(
    amount: float,
    date,
    recurrence: str = "none",
    interval: int = 1,
    end_date=None,
    name: str = "event",
) -> Event:
    return Event(
        id=name,
        name=name,
        amount=amount,
        date=date,
        recurrence=Recurrence.parse(recurrence),
        interval=interval,
        end_date=end_date,
    )


def zero_yields() -> Dict[str, float]:
    return {t.value: 0.0 for t in AssetType}
