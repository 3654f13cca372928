"""
Excel workbook extractor using openpyxl.

Only the first worksheet is read. Rows become JSON records keyed by the
header row, so the output reads like the spreadsheet's own sheet-to-JSON
export.
"""

import datetime
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openpyxl import load_workbook

from ..errors import ExtractionError
from ..models import DocumentFormat, ExtractionVariant
from . import BaseExtractor

EMPTY_HEADER = "__EMPTY"


def _header_names(row: Sequence[Any]) -> List[str]:
    """Column names from the header row; blanks and duplicates get suffixes."""
    names: List[str] = []
    seen: Dict[str, int] = {}
    for value in row:
        name = str(value).strip() if value is not None else ""
        if not name:
            name = EMPTY_HEADER
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def _cell_value(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return value


def rows_to_records(rows: Iterable[Sequence[Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Convert raw sheet rows to records, stopping after limit records."""
    header_row: Optional[List[Any]] = None
    headers: List[str] = []
    records: List[Dict[str, Any]] = []

    for row in rows:
        if all(value is None or (isinstance(value, str) and not value.strip()) for value in row):
            continue
        if header_row is None:
            header_row = list(row)
            headers = _header_names(header_row)
            continue
        if limit is not None and len(records) >= limit:
            break

        if len(row) > len(headers):
            # Names are prefix-stable, so widening keeps existing keys
            header_row = header_row + [None] * (len(row) - len(header_row))
            headers = _header_names(header_row)
        record = {
            headers[i]: _cell_value(value)
            for i, value in enumerate(row)
            if value is not None
        }
        records.append(record)

    return records


class ExcelExtractor(BaseExtractor):
    """First-worksheet spreadsheet extractor."""

    @property
    def format(self) -> DocumentFormat:
        return DocumentFormat.EXCEL

    @property
    def name(self) -> str:
        return "openpyxl"

    def try_primary(self, file_path: Path, variant: ExtractionVariant) -> str:
        limit = self.settings.excel_fast_row_limit if variant is ExtractionVariant.FAST else None

        workbook = load_workbook(str(file_path), read_only=True, data_only=True)
        try:
            if not workbook.worksheets:
                raise ExtractionError("Workbook has no worksheets")
            sheet = workbook.worksheets[0]
            records = rows_to_records(sheet.iter_rows(values_only=True), limit=limit)
        finally:
            workbook.close()

        return json.dumps(records, indent=2, ensure_ascii=False, default=str)
