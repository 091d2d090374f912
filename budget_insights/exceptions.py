"""Exception hierarchy shared by the analysis engine and the file loader."""


class BudgetInsightsError(Exception):
    """Base error for the budget_insights package."""


class EmptyRecordSetError(BudgetInsightsError, ValueError):
    """Raised when an analysis that divides by the record count gets no records."""


class DataLoadError(BudgetInsightsError):
    """Raised when a budget file cannot be read into records."""
