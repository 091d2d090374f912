import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from .aggregations import dashboard_summary
from .budget_analyzer import AnalysisResult, BudgetAnalyzer
from .config_loader import get_settings, get_thresholds, load_default_config, render_template
from .exceptions import DataLoadError
from .file_loader import load_records
from .query_classifier import AnalysisKind
from .records import Record, freeze_records

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    EMPTY = "empty"
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"


class BudgetSession:
    """
    Holds one user's record set and answers questions against it.

    Records are replaced wholesale on every load and never modified in place,
    so each question sees the snapshot that was current when it was asked.
    Sessions share no state with each other. One random generator lives for
    the whole session so the sampled general insight varies between questions.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else load_default_config()
        self.rng = np.random.default_rng(get_settings(self.config)['random_seed'])
        self.records: Tuple[Record, ...] = ()
        self.status = SessionStatus.EMPTY
        self.load_error: Optional[str] = None

    def load_records(self, records: Iterable[Record]) -> int:
        """Replace the session's records; returns the new record count."""
        self.records = freeze_records(records)
        self.status = SessionStatus.LOADED
        self.load_error = None
        logger.info(f"Session loaded {len(self.records)} records")
        return len(self.records)

    def load_file(self, path: str) -> int:
        """
        Load records from a spreadsheet, replacing the current set.

        On failure the session drops its records, moves to LOAD_FAILED and
        re-raises the DataLoadError.
        """
        try:
            records = load_records(path)
        except DataLoadError as e:
            self.records = ()
            self.status = SessionStatus.LOAD_FAILED
            self.load_error = str(e)
            raise
        return self.load_records(records)

    def load_message(self) -> str:
        return render_template(self.config, 'loaded', record_count=len(self.records))

    def ask(self, question: str) -> AnalysisResult:
        """Answer a question, or ask for data first when nothing is loaded."""
        if not self.records:
            return AnalysisResult(kind=AnalysisKind.GENERAL, insight=render_template(self.config, 'no_data'))
        return BudgetAnalyzer(self.records, config=self.config, rng=self.rng).analyze_query(question)

    def summary(self) -> Optional[Dict[str, Any]]:
        return dashboard_summary(self.records, get_thresholds(self.config))
