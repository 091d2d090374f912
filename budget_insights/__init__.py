"""
Budget Insights Package.

This package answers free-text questions about budget vs actual records by
routing each question to a fixed aggregation and rendering a narrative with
chart-ready data.
"""

__version__ = "0.1.0"

# Import key functions from records
from .records import (
    get_field,
    parse_numeric,
    parse_year,
    variance_pct,
    detect_ledger_fields,
)

# Import aggregation helpers
from .aggregations import (
    AnalysisThresholds,
    group_by_year,
    group_by_ledger,
    dashboard_summary,
)

# Import the query classifier
from .query_classifier import AnalysisKind, classify

# Import the analysis engine
from .budget_analyzer import (
    AnalysisResult,
    BudgetAnalyzer,
    ChartType,
    analyze_query,
    trend_analysis,
    missed_budget_analysis,
    discrepancy_analysis,
    totals_analysis,
    averages_analysis,
    performance_analysis,
    ledger_analysis,
    general_insight,
)

# Import the exception hierarchy
from .exceptions import BudgetInsightsError, DataLoadError, EmptyRecordSetError

# Import configuration helpers
from .config_loader import load_config, load_default_config, merge_configs

# Import file loading and sessions
from .file_loader import load_records, records_from_frame
from .session import BudgetSession, SessionStatus

# Define what should be available in "from budget_insights import *"
__all__ = [
    # Records
    'get_field',
    'parse_numeric',
    'parse_year',
    'variance_pct',
    'detect_ledger_fields',

    # Aggregations
    'AnalysisThresholds',
    'group_by_year',
    'group_by_ledger',
    'dashboard_summary',

    # Classification
    'AnalysisKind',
    'classify',

    # Analysis
    'AnalysisResult',
    'BudgetAnalyzer',
    'BudgetInsightsError',
    'ChartType',
    'EmptyRecordSetError',
    'analyze_query',
    'trend_analysis',
    'missed_budget_analysis',
    'discrepancy_analysis',
    'totals_analysis',
    'averages_analysis',
    'performance_analysis',
    'ledger_analysis',
    'general_insight',

    # Configuration
    'load_config',
    'load_default_config',
    'merge_configs',

    # Loading and sessions
    'DataLoadError',
    'load_records',
    'records_from_frame',
    'BudgetSession',
    'SessionStatus',
]
