"""Keyword router that maps a free-text budget question to an analysis kind."""

import logging
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)


class AnalysisKind(Enum):
    TREND = "trend"
    MISSED_BUDGET = "missed_budget"
    DISCREPANCY = "discrepancy"
    TOTALS = "totals"
    AVERAGES = "averages"
    PERFORMANCE = "performance"
    LEDGER = "ledger"
    GENERAL = "general"


# Checked top to bottom; the first kind with a matching substring wins.
# Order and keywords are a contract: "trend" + "variance" is a trend question.
KEYWORD_RULES: Tuple[Tuple[AnalysisKind, Tuple[str, ...]], ...] = (
    (AnalysisKind.TREND, ("trend", "yearly")),
    (AnalysisKind.MISSED_BUDGET, ("missed", "miss", "over budget")),
    (AnalysisKind.DISCREPANCY, ("discrepan", "variance", "difference")),
    (AnalysisKind.TOTALS, ("total", "sum")),
    (AnalysisKind.AVERAGES, ("average", "mean")),
    (AnalysisKind.PERFORMANCE, ("best", "worst", "performance")),
    (AnalysisKind.LEDGER, ("gl", "general ledger")),
)


def classify(question: str) -> AnalysisKind:
    """
    Classify a question by plain substring matching on its lower-cased text.

    Args:
        question: Free-text question

    Returns:
        The first AnalysisKind whose keyword set matches, or
        AnalysisKind.GENERAL when nothing matches
    """
    text = (question or "").lower()
    for kind, keywords in KEYWORD_RULES:
        matched = next((kw for kw in keywords if kw in text), None)
        if matched is not None:
            logger.debug(f"Classified question as {kind.value} (keyword '{matched}')")
            return kind
    logger.debug("No keyword matched; falling back to general insight")
    return AnalysisKind.GENERAL
