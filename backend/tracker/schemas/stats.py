from pydantic import BaseModel


class MonthlyTrendItem(BaseModel):
    label: str
    year: int
    month: int
    income: float
    expenses: float

    class Config:
        from_attributes = True


class StatisticsResponse(BaseModel):
    balance: float
    monthly_income: float
    monthly_expenses: float
    expense_change: float
    savings_rate: float
    category_breakdown: dict[str, float]
    monthly_trends: list[MonthlyTrendItem]

    class Config:
        from_attributes = True
