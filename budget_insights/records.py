"""
Record access helpers for budget line items.

Budget records arrive as plain field-name-to-value mappings straight out of a
spreadsheet, so the same logical field can show up under several spellings
and numbers can arrive as strings. Everything that reads a record goes
through the accessors here:

    get_field(record, 'budget')   -> first present raw value, or None
    get_budget(record)            -> float (0.0 when missing/unparsable)
    get_year(record)              -> int (current year when missing/unparsable)
    get_category(record)          -> str ('Unknown' when missing)
"""

import math
from datetime import MAXYEAR, MINYEAR, date
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

Record = Mapping[str, Any]

# Accepted spellings per logical field, checked in order
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'year': ('Year', 'year'),
    'budget': ('Budget', 'budget'),
    'actual': ('Actual', 'actual'),
    'category': ('Category', 'category', 'Description', 'description'),
}

LEDGER_FIELD_MARKERS = ('gl', 'account', 'code')

UNKNOWN_CATEGORY = 'Unknown'


def is_missing(value: Any) -> bool:
    """True for None, NaN/NaT and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def get_field(record: Record, field: str) -> Any:
    """
    Return the raw value of a logical field using its accepted spellings.

    Args:
        record: A single budget record
        field: Logical field name ('year', 'budget', 'actual', 'category')

    Returns:
        The first present value, or None when no spelling is present
    """
    for name in FIELD_ALIASES[field]:
        if name in record and not is_missing(record[name]):
            return record[name]
    return None


def parse_numeric(value: Any) -> float:
    """Convert a value to float, handling currency and thousands separators.

    Args:
        value: The value to convert, string or numeric

    Returns:
        float: The numeric value, or 0.0 if conversion fails
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        # Remove whitespace, currency symbols and thousands separators
        value = value.strip().replace('$', '').replace(',', '')
    try:
        result = float(value)
    except (ValueError, TypeError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def parse_year(value: Any, default: Optional[int] = None) -> int:
    """
    Parse a year value ('2021', 2021.0, 2021) falling back to the current year.

    Years outside the calendar range MINYEAR..MAXYEAR count as unparsable.
    """
    fallback = default if default is not None else date.today().year
    if is_missing(value) or isinstance(value, bool):
        return fallback
    if isinstance(value, str):
        value = value.strip()
    try:
        year = float(value)
    except (ValueError, TypeError):
        return fallback
    if not math.isfinite(year) or not MINYEAR <= year <= MAXYEAR:
        return fallback
    return int(year)


def get_budget(record: Record) -> float:
    return parse_numeric(get_field(record, 'budget'))


def get_actual(record: Record) -> float:
    return parse_numeric(get_field(record, 'actual'))


def get_year(record: Record) -> int:
    return parse_year(get_field(record, 'year'))


def get_category(record: Record) -> str:
    value = get_field(record, 'category')
    return UNKNOWN_CATEGORY if value is None else str(value).strip()


def variance_pct(actual: float, budget: float) -> float:
    """
    Variance of actual against budget in percent.

    Defined as 0 when budget is 0. This is a policy choice to avoid division
    by zero, not a derived value.
    """
    if budget == 0:
        return 0.0
    return (actual - budget) / budget * 100


def freeze_records(records: Iterable[Record]) -> Tuple[Record, ...]:
    """Snapshot a record sequence as a tuple of read-only mappings."""
    return tuple(MappingProxyType(dict(record)) for record in records)


def detect_ledger_fields(records: Sequence[Record]) -> List[str]:
    """
    Find ledger-code fields by name in the first record.

    A field counts when its lower-cased name contains 'gl', 'account' or
    'code'. Only the first record's field names are inspected.
    """
    if not records:
        return []
    return [
        key for key in records[0].keys()
        if any(marker in str(key).lower() for marker in LEDGER_FIELD_MARKERS)
    ]


def is_truthy(value: Any) -> bool:
    """Truthiness for spreadsheet values: missing, zero and False are falsy."""
    if is_missing(value):
        return False
    try:
        return bool(value)
    except (TypeError, ValueError):
        return True


def records_to_frame(records: Sequence[Record]) -> pd.DataFrame:
    """
    Normalize records into a DataFrame with one row per record.

    Columns: position, year, budget, actual, category, variance, discrepancy.
    Row order follows the input order.
    """
    rows = []
    for position, record in enumerate(records):
        budget = get_budget(record)
        actual = get_actual(record)
        rows.append({
            'position': position,
            'year': get_year(record),
            'budget': budget,
            'actual': actual,
            'category': get_category(record),
            'variance': variance_pct(actual, budget),
            'discrepancy': actual - budget,
        })
    columns = ['position', 'year', 'budget', 'actual', 'category', 'variance', 'discrepancy']
    return pd.DataFrame(rows, columns=columns).astype({
        'position': int,
        'year': int,
        'budget': float,
        'actual': float,
        'variance': float,
        'discrepancy': float,
    })


def to_native(obj):
    """Convert numpy/pandas values to Python native types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    elif isinstance(obj, pd.DataFrame):
        return [to_native(row) for row in obj.to_dict(orient='records')]
    elif isinstance(obj, pd.Series):
        return to_native(obj.to_dict())
    elif isinstance(obj, Mapping):
        return {key: to_native(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_native(item) for item in obj]
    return obj
