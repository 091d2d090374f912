"""
Aggregation layer for budget records.

Pure math only: grouped sums, variances and threshold bands. Narrative text
lives in budget_analyzer.py; nothing here formats strings for display.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .records import (
    Record,
    get_actual,
    get_budget,
    is_truthy,
    records_to_frame,
    variance_pct,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisThresholds:
    """Centralized thresholds for the qualitative labels (all in percent)."""
    # Missed budget: actual > budget * missed_margin
    missed_margin: float = 1.05
    missed_high_risk_pct: float = 30.0
    missed_moderate_pct: float = 15.0

    # Records with |variance| above this count as discrepancies
    discrepancy_pct: float = 5.0

    # Status marks for per-year and per-ledger variance
    status_good_pct: float = 5.0
    status_warning_pct: float = 15.0

    # Totals: |variance| at or under this is "Excellent Control"
    totals_control_pct: float = 5.0

    # Averages: |variance| under this is "Good Consistency"
    averages_consistency_pct: float = 10.0

    # Performance score bands
    performance_excellent_pct: float = 5.0
    performance_good_pct: float = 15.0
    performance_fair_pct: float = 25.0

    # Ledger keys above this |variance| need review
    ledger_review_pct: float = 15.0

    # Dashboard status: |average variance| above this is "Review"
    dashboard_review_pct: float = 10.0


def variance_status(variance: float, thresholds: AnalysisThresholds) -> str:
    """Map a variance to 'good', 'warning' or 'poor'."""
    magnitude = abs(variance)
    if magnitude < thresholds.status_good_pct:
        return 'good'
    elif magnitude < thresholds.status_warning_pct:
        return 'warning'
    return 'poor'


def performance_score(abs_variance: float, thresholds: AnalysisThresholds) -> str:
    """Score band for an absolute variance."""
    if abs_variance < thresholds.performance_excellent_pct:
        return 'Excellent'
    elif abs_variance < thresholds.performance_good_pct:
        return 'Good'
    elif abs_variance < thresholds.performance_fair_pct:
        return 'Fair'
    return 'Poor'


def group_by_year(records: Sequence[Record]) -> pd.DataFrame:
    """
    Sum budget and actual per year.

    Returns:
        DataFrame with columns [year, budget, actual, count, variance], sorted
        ascending by year. Empty input gives an empty frame with those columns.
    """
    columns = ['year', 'budget', 'actual', 'count', 'variance']
    df = records_to_frame(records)
    if df.empty:
        return pd.DataFrame(columns=columns)

    yearly = (
        df.groupby('year', sort=True)
        .agg(budget=('budget', 'sum'), actual=('actual', 'sum'), count=('position', 'size'))
        .reset_index()
    )
    yearly['variance'] = [
        variance_pct(actual, budget)
        for actual, budget in zip(yearly['actual'], yearly['budget'])
    ]
    return yearly[columns]


def count_by_year(df: pd.DataFrame) -> Dict[int, int]:
    """Count normalized rows per year, ascending by year."""
    if df.empty:
        return {}
    counts = df.groupby('year', sort=True).size()
    return {int(year): int(count) for year, count in counts.items()}


def ledger_key(value: Any) -> str:
    """String form of a ledger value; 4000, 4000.0 and '4000' share a key."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()


def group_by_ledger(records: Sequence[Record], ledger_fields: List[str]) -> pd.DataFrame:
    """
    Accumulate count, budget and actual per ledger value.

    Every detected ledger field feeds the same keyspace, so equal values in
    different fields land on the same key. Keys keep first-seen order before
    ranking; the result is ranked by descending |variance| with a stable sort.

    Returns:
        DataFrame with columns [gl, count, budget, actual, variance]
    """
    columns = ['gl', 'count', 'budget', 'actual', 'variance']
    summary: Dict[str, Dict[str, float]] = {}

    for record in records:
        budget = get_budget(record)
        actual = get_actual(record)
        for field in ledger_fields:
            value = record.get(field)
            if not is_truthy(value):
                continue
            key = ledger_key(value)
            entry = summary.setdefault(key, {'count': 0, 'budget': 0.0, 'actual': 0.0})
            entry['count'] += 1
            entry['budget'] += budget
            entry['actual'] += actual

    if not summary:
        return pd.DataFrame(columns=columns)

    ledger_df = pd.DataFrame(
        [{'gl': key, **values} for key, values in summary.items()]
    )
    ledger_df['variance'] = [
        variance_pct(actual, budget)
        for actual, budget in zip(ledger_df['actual'], ledger_df['budget'])
    ]
    ledger_df = ledger_df.sort_values(
        'variance', key=lambda s: s.abs(), ascending=False, kind='mergesort'
    ).reset_index(drop=True)
    return ledger_df[columns]


def dashboard_summary(
    records: Sequence[Record],
    thresholds: Optional[AnalysisThresholds] = None
) -> Optional[Dict[str, Any]]:
    """
    Overview numbers behind a yearly budget-vs-actual dashboard.

    Args:
        records: Budget records
        thresholds: Optional thresholds (uses defaults when None)

    Returns:
        Dictionary with years, budget_values, actual_values, variance,
        total_records, average_variance and status ('Good' or 'Review'),
        or None for an empty record set.
    """
    if not records:
        return None
    thresholds = thresholds or AnalysisThresholds()

    yearly = group_by_year(records)
    variances = [float(v) for v in yearly['variance']]
    average_variance = float(np.mean(variances)) if variances else 0.0
    status = 'Review' if abs(average_variance) > thresholds.dashboard_review_pct else 'Good'

    logger.debug(f"Dashboard summary over {len(records)} records and {len(yearly)} years")

    return {
        'years': [int(y) for y in yearly['year']],
        'budget_values': [float(v) for v in yearly['budget']],
        'actual_values': [float(v) for v in yearly['actual']],
        'variance': variances,
        'total_records': len(records),
        'average_variance': average_variance,
        'status': status,
    }
