"""
Spreadsheet loading for budget records.

Reads the first sheet of an Excel workbook (or a CSV file) into a list of
plain dictionaries, one per row, keyed by the header row. Empty cells are
left out of a row's mapping so that downstream field lookups fall back to
their defaults. Anything that goes wrong while reading is reported as
DataLoadError, which callers treat as a "could not load data" state.
"""

import logging
import os
from typing import Any, Dict, List, Union

import pandas as pd

from .exceptions import DataLoadError
from .records import is_missing, to_native

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xls')
CSV_EXTENSIONS = ('.csv',)
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS + CSV_EXTENSIONS


def records_from_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Convert a DataFrame into budget records.

    Args:
        df: DataFrame with one budget line per row

    Returns:
        List of dictionaries with native Python values; missing cells omitted
    """
    records = []
    for row in df.to_dict(orient='records'):
        records.append({
            str(key): to_native(value)
            for key, value in row.items()
            if not is_missing(value)
        })
    return records


def load_records(path: str, sheet_name: Union[int, str] = 0) -> List[Dict[str, Any]]:
    """
    Load budget records from an Excel or CSV file.

    Args:
        path: Path to a .xlsx, .xls or .csv file
        sheet_name: Excel sheet to read (defaults to the first sheet)

    Returns:
        List of record dictionaries in sheet row order

    Raises:
        DataLoadError: If the file type is unsupported or the file cannot be read
    """
    extension = os.path.splitext(path)[1].lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise DataLoadError(
            f"Please upload an Excel file (.xlsx or .xls) or a CSV file; got '{os.path.basename(path)}'"
        )
    if not os.path.exists(path):
        raise DataLoadError(f"Budget file not found: {path}")

    try:
        if extension in EXCEL_EXTENSIONS:
            df = pd.read_excel(path, sheet_name=sheet_name)
        else:
            df = pd.read_csv(path)
    except Exception as e:
        logger.error(f"Error reading budget file {path}: {e}")
        raise DataLoadError(f"Error reading the file '{os.path.basename(path)}'. Please try again.") from e

    records = records_from_frame(df)
    logger.info(f"Loaded {len(records)} records from {path}")
    return records
