# tabular_qa/infrastructure/spreadsheet_loader.py

from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from tabular_qa.domain.interfaces import RowSourcePort
from tabular_qa.domain.models import FieldValue, Record


EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


class SpreadsheetRowSource(RowSourcePort):
    """
    Loads knowledge-base rows from a spreadsheet.

    - Excel workbooks: every sheet is read, each row tagged with its sheet name
    - CSV files: one group, named after the file stem

    Empty cells are dropped so a missing field is simply absent from the record.
    Raises FileNotFoundError / ValueError on a missing or unsupported file;
    deciding whether that is fatal belongs to the composition root.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    def load(self) -> List[Record]:
        if not self._path.exists():
            raise FileNotFoundError(f"Data file not found: {self._path}")

        suffix = self._path.suffix.lower()
        if suffix in EXCEL_SUFFIXES:
            sheets = pd.read_excel(self._path, sheet_name=None)
        elif suffix == ".csv":
            sheets = {self._path.stem: pd.read_csv(self._path, encoding="utf-8")}
        else:
            raise ValueError(f"Unsupported data file type: '{suffix}'")

        records: List[Record] = []
        for sheet_name, frame in sheets.items():
            for row in frame.to_dict(orient="records"):
                fields = self._clean_row(row)
                if not fields:
                    continue
                records.append(Record(fields=fields, group=str(sheet_name), row_index=len(records)))

        print(f"[SpreadsheetLoader] Loaded {len(records)} rows across "
              f"{len(sheets)} sheet(s) from {self._path.name}")
        return records

    # ─── Private ─────────────────────────────────────────────────────────────

    @staticmethod
    def _clean_row(row: Dict) -> Dict[str, FieldValue]:
        fields: Dict[str, FieldValue] = {}
        for name, value in row.items():
            cleaned = _clean_value(value)
            if cleaned is None:
                continue
            fields[str(name).strip()] = cleaned
        return fields


def _clean_value(value) -> Optional[FieldValue]:
    if isinstance(value, str):
        return value.strip() or None
    if pd.isna(value):
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        # Whole-number cells (years, ids) come back from pandas as floats
        return int(value) if value.is_integer() else value
    if isinstance(value, int):
        return value
    return str(value).strip() or None
