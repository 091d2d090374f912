"""
Budget Question Answering Engine

Two layers:
    1. Routing (query_classifier.classify): keyword rules pick an AnalysisKind
    2. Analysis (BudgetAnalyzer): one aggregation per kind, rendered through
       the Jinja2 narrative templates in configs/budget_insights.yaml

Usage Examples:

    from budget_insights import BudgetAnalyzer

    records = [
        {"Year": 2021, "Budget": 100, "Actual": 120, "Category": "Travel"},
        {"Year": 2022, "Budget": 100, "Actual": 90, "Category": "Travel"},
    ]
    analyzer = BudgetAnalyzer(records)
    result = analyzer.analyze_query("What is the total spend?")
    print(result.insight)          # narrative text
    result.data                    # chart-ready payload (or None)
    result.chart_type              # ChartType.LINE / BAR / TABLE (or None)

Every analysis is a pure function of the record snapshot taken at
construction time. Analyses that divide by the record count
(missed-budget share, averages) require a non-empty record set and raise
EmptyRecordSetError otherwise.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .aggregations import (
    AnalysisThresholds,
    count_by_year,
    group_by_ledger,
    group_by_year,
    performance_score,
    variance_status,
)
from .config_loader import (
    get_example_questions,
    get_settings,
    get_thresholds,
    load_default_config,
    render_template,
)
from .exceptions import EmptyRecordSetError
from .query_classifier import AnalysisKind, classify
from .records import (
    Record,
    detect_ledger_fields,
    freeze_records,
    records_to_frame,
    to_native,
    variance_pct,
)

logger = logging.getLogger(__name__)

STATUS_MARKS = {'good': '✅', 'warning': '⚠️', 'poor': '❌'}
SCORE_MARKS = {'Excellent': '🌟', 'Good': '✅', 'Fair': '⚠️', 'Poor': '❌'}


class ChartType(Enum):
    LINE = "line"
    BAR = "bar"
    TABLE = "table"


@dataclass
class AnalysisResult:
    """Narrative answer plus optional chart-ready payload."""
    kind: AnalysisKind
    insight: str
    data: Any = None
    chart_type: Optional[ChartType] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form with native Python types."""
        return {
            'kind': self.kind.value,
            'insight': self.insight,
            'data': to_native(self.data),
            'chart_type': self.chart_type.value if self.chart_type else None,
        }


# ---- DISPLAY FORMATTING ----

def format_amount(value: float, currency_symbol: str = '$') -> str:
    """Currency with thousands separators and at most two decimals: $1,234.5"""
    text = f"{abs(value):,.2f}".rstrip('0').rstrip('.')
    sign = '-' if value < 0 and text != '0' else ''
    return f"{sign}{currency_symbol}{text}"


def format_signed_pct(value: float) -> str:
    """One-decimal percentage with a leading '+' for positive values."""
    return f"{'+' if value > 0 else ''}{value:.1f}%"


def format_pct(value: float) -> str:
    return f"{value:.1f}%"


def format_threshold(value: float) -> str:
    return f"{value:g}%"


class BudgetAnalyzer:
    """Routes questions to one of eight fixed analyses over a record snapshot."""

    def __init__(
        self,
        records: Iterable[Record],
        config: Optional[Dict[str, Any]] = None,
        thresholds: Optional[AnalysisThresholds] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Args:
            records: Budget records (field-name-to-value mappings)
            config: Loaded configuration; the packaged defaults when None
            thresholds: Overrides the thresholds section of config
            rng: Random generator for the sampled general insight mode
        """
        self.records = freeze_records(records)
        self.config = config if config is not None else load_default_config()
        self.settings = get_settings(self.config)
        self.thresholds = thresholds or get_thresholds(self.config)
        self.rng = rng or np.random.default_rng(self.settings['random_seed'])
        self._handlers = {
            AnalysisKind.TREND: self.analyze_trends,
            AnalysisKind.MISSED_BUDGET: self.analyze_missed_budgets,
            AnalysisKind.DISCREPANCY: self.analyze_discrepancies,
            AnalysisKind.TOTALS: self.analyze_totals,
            AnalysisKind.AVERAGES: self.analyze_averages,
            AnalysisKind.PERFORMANCE: self.analyze_performance,
            AnalysisKind.LEDGER: self.analyze_ledger,
            AnalysisKind.GENERAL: self.provide_general_insight,
        }

    def analyze_query(self, query: str) -> AnalysisResult:
        """Classify the question and run the matching analysis."""
        kind = classify(query)
        logger.info(f"Running {kind.value} analysis over {len(self.records)} records")
        return self.run(kind)

    def run(self, kind: AnalysisKind) -> AnalysisResult:
        return self._handlers[kind]()

    # ---- helpers ----

    def _render(self, template_name: str, **params) -> str:
        return render_template(self.config, template_name, **params)

    def _amount(self, value: float) -> str:
        return format_amount(value, self.settings['currency_symbol'])

    def _require_records(self, kind: AnalysisKind) -> None:
        if not self.records:
            raise EmptyRecordSetError(
                f"{kind.value} analysis requires at least one record; check for empty input before calling"
            )

    def _frame(self) -> pd.DataFrame:
        return records_to_frame(self.records)

    def _augmented(self, position: int, **extra) -> Dict[str, Any]:
        """Copy of the original record with computed fields attached."""
        return {**dict(self.records[position]), **extra}

    # ---- analyses ----

    def analyze_trends(self) -> AnalysisResult:
        """Year-over-year variance series with an improving/declining signal."""
        yearly = group_by_year(self.records)

        if len(yearly) < 2:
            logger.warning(f"Trend analysis needs 2+ years; found {len(yearly)}")
            return AnalysisResult(
                kind=AnalysisKind.TREND,
                insight=self._render('trend_insufficient'),
            )

        variances = yearly['variance'].abs().tolist()
        improving_pairs = sum(
            1 for i in range(1, len(variances)) if variances[i] < variances[i - 1]
        )
        pairs = len(variances) - 1
        improving = improving_pairs > pairs / 2

        series = []
        for row in yearly.to_dict(orient='records'):
            status = variance_status(row['variance'], self.thresholds)
            series.append({
                'year': int(row['year']),
                'budget': float(row['budget']),
                'actual': float(row['actual']),
                'variance': float(row['variance']),
                'status': status,
            })

        insight = self._render(
            'trend',
            first_year=series[0]['year'],
            last_year=series[-1]['year'],
            improving=improving,
            years=[
                {
                    **row,
                    'variance_display': format_signed_pct(row['variance']),
                    'mark': STATUS_MARKS[row['status']],
                }
                for row in series
            ],
        )
        return AnalysisResult(
            kind=AnalysisKind.TREND,
            insight=insight,
            data=series,
            chart_type=ChartType.LINE,
        )

    def analyze_missed_budgets(self) -> AnalysisResult:
        """Records more than the allowed margin over budget."""
        self._require_records(AnalysisKind.MISSED_BUDGET)
        t = self.thresholds

        df = self._frame()
        missed_df = df[df['actual'] > df['budget'] * t.missed_margin]
        missed_records = [dict(self.records[p]) for p in missed_df['position']]

        total_count = len(self.records)
        missed_count = len(missed_records)
        missed_pct = missed_count / total_count * 100

        if missed_count == 0:
            insight = self._render('missed_none')
        else:
            if missed_pct > t.missed_high_risk_pct:
                risk = 'high'
            elif missed_pct > t.missed_moderate_pct:
                risk = 'moderate'
            else:
                risk = None
            insight = self._render(
                'missed',
                missed_count=missed_count,
                total_count=total_count,
                missed_pct_display=format_pct(missed_pct),
                margin_display=format_threshold(round((t.missed_margin - 1) * 100, 6)),
                high_risk_display=format_threshold(t.missed_high_risk_pct),
                risk=risk,
                yearly_misses=list(count_by_year(missed_df).items()),
            )

        return AnalysisResult(
            kind=AnalysisKind.MISSED_BUDGET,
            insight=insight,
            data=missed_records,
            chart_type=ChartType.BAR,
        )

    def analyze_discrepancies(self) -> AnalysisResult:
        """Records whose |variance| exceeds the discrepancy threshold, largest first."""
        t = self.thresholds
        top_n = self.settings['top_n']

        df = self._frame()
        kept = df[df['variance'].abs() > t.discrepancy_pct]
        ranked = kept.sort_values('variance', key=lambda s: s.abs(), ascending=False, kind='mergesort')

        data = [
            self._augmented(int(row.position), variance=float(row.variance), discrepancy=float(row.discrepancy))
            for row in ranked.itertuples(index=False)
        ]

        if kept.empty:
            insight = self._render('discrepancy_none', threshold_display=format_threshold(t.discrepancy_pct))
        else:
            total_discrepancy = float(kept['discrepancy'].abs().sum())
            average_variance = float(kept['variance'].abs().mean())
            top = [
                {'category': row.category, 'variance_display': format_signed_pct(row.variance)}
                for row in ranked.head(top_n).itertuples(index=False)
            ]
            insight = self._render(
                'discrepancy',
                count=len(kept),
                threshold_display=format_threshold(t.discrepancy_pct),
                total_discrepancy_display=self._amount(total_discrepancy),
                average_variance_display=format_pct(average_variance),
                top=top,
            )

        return AnalysisResult(
            kind=AnalysisKind.DISCREPANCY,
            insight=insight,
            data=data,
            chart_type=ChartType.TABLE,
        )

    def analyze_totals(self) -> AnalysisResult:
        """Overall budget vs actual."""
        df = self._frame()
        total_budget = float(df['budget'].sum())
        total_actual = float(df['actual'].sum())
        variance = variance_pct(total_actual, total_budget)

        if abs(variance) <= self.thresholds.totals_control_pct:
            label = 'excellent'
        elif variance > 0:
            label = 'over'
        else:
            label = 'under'

        insight = self._render(
            'totals',
            total_budget_display=self._amount(total_budget),
            total_actual_display=self._amount(total_actual),
            variance_display=format_signed_pct(variance),
            label=label,
        )
        return AnalysisResult(
            kind=AnalysisKind.TOTALS,
            insight=insight,
            data={'total_budget': total_budget, 'total_actual': total_actual, 'variance': variance},
        )

    def analyze_averages(self) -> AnalysisResult:
        """Mean budget and mean actual per record."""
        self._require_records(AnalysisKind.AVERAGES)

        df = self._frame()
        avg_budget = float(df['budget'].sum()) / len(df)
        avg_actual = float(df['actual'].sum()) / len(df)
        avg_variance = variance_pct(avg_actual, avg_budget)
        consistent = abs(avg_variance) < self.thresholds.averages_consistency_pct

        insight = self._render(
            'averages',
            avg_budget_display=self._amount(avg_budget),
            avg_actual_display=self._amount(avg_actual),
            avg_variance_display=format_signed_pct(avg_variance),
            consistent=consistent,
        )
        return AnalysisResult(
            kind=AnalysisKind.AVERAGES,
            insight=insight,
            data={'avg_budget': avg_budget, 'avg_actual': avg_actual, 'avg_variance': avg_variance},
        )

    def analyze_performance(self) -> AnalysisResult:
        """Score every record by |variance| band; first few best and worst in input order."""
        limit = self.settings['best_worst_n']

        df = self._frame()
        performance: List[Dict[str, Any]] = []
        distribution: Dict[str, int] = {}
        best, worst = [], []

        for row in df.itertuples(index=False):
            abs_variance = abs(float(row.variance))
            score = performance_score(abs_variance, self.thresholds)
            performance.append(self._augmented(int(row.position), variance=abs_variance, score=score))
            distribution[score] = distribution.get(score, 0) + 1

            entry = {'category': row.category, 'variance_display': format_pct(abs_variance)}
            if score == 'Excellent' and len(best) < limit:
                best.append(entry)
            elif score == 'Poor' and len(worst) < limit:
                worst.append(entry)

        insight = self._render(
            'performance',
            distribution=[(score, count, SCORE_MARKS[score]) for score, count in distribution.items()],
            best=best,
            worst=worst,
        )
        return AnalysisResult(
            kind=AnalysisKind.PERFORMANCE,
            insight=insight,
            data=performance,
            chart_type=ChartType.BAR,
        )

    def analyze_ledger(self) -> AnalysisResult:
        """Budget vs actual per general-ledger code."""
        ledger_fields = detect_ledger_fields(self.records)

        if not ledger_fields:
            logger.warning("No ledger fields found in the first record")
            return AnalysisResult(
                kind=AnalysisKind.LEDGER,
                insight=self._render('ledger_missing'),
            )

        t = self.thresholds
        ledger_df = group_by_ledger(self.records, ledger_fields)
        data = [
            {
                'gl': row['gl'],
                'count': int(row['count']),
                'budget': float(row['budget']),
                'actual': float(row['actual']),
                'variance': float(row['variance']),
            }
            for row in ledger_df.to_dict(orient='records')
        ]
        review_count = sum(1 for entry in data if abs(entry['variance']) > t.ledger_review_pct)

        top = [
            {
                'gl': entry['gl'],
                'variance_display': format_signed_pct(entry['variance']),
                'mark': STATUS_MARKS[variance_status(entry['variance'], t)],
            }
            for entry in data[:self.settings['top_n']]
        ]
        insight = self._render(
            'ledger',
            fields=ledger_fields,
            key_count=len(data),
            top=top,
            review_count=review_count,
            review_display=format_threshold(t.ledger_review_pct),
        )
        return AnalysisResult(
            kind=AnalysisKind.LEDGER,
            insight=insight,
            data=data,
            chart_type=ChartType.TABLE,
        )

    def provide_general_insight(self) -> AnalysisResult:
        """Help message or data snapshot, chosen by the general_insight_mode setting."""
        mode = self.settings['general_insight_mode']
        if mode == 'sampled':
            mode = 'help' if self.rng.integers(0, 2) == 0 else 'snapshot'

        if mode == 'help':
            insight = self._render('general_help', example_questions=get_example_questions(self.config))
        else:
            fields = list(self.records[0].keys()) if self.records else []
            insight = self._render('general_snapshot', record_count=len(self.records), fields=fields)

        return AnalysisResult(kind=AnalysisKind.GENERAL, insight=insight)


# ---- functional API ----

def analyze_query(question: str, records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    """One-shot: classify the question and analyze the records."""
    return BudgetAnalyzer(records, config=config).analyze_query(question)


def trend_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_trends()


def missed_budget_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_missed_budgets()


def discrepancy_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_discrepancies()


def totals_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_totals()


def averages_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_averages()


def performance_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_performance()


def ledger_analysis(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).analyze_ledger()


def general_insight(records: Iterable[Record], config: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    return BudgetAnalyzer(records, config=config).provide_general_insight()
