"""
Grid export/import service.

Writes the grid's rows to CSV or Excel with header names as column titles,
and reads an Excel sheet back into row dicts keyed by field for a host
import intent. Uses pandas with the openpyxl engine.
"""

from pathlib import Path
from typing import List, Dict, Any, Iterable, Optional, Union

import pandas as pd

from core.domain.grid.cell_types import get_cell_strategy
from core.domain.grid.columns import display_columns
from core.domain.grid.models import ColumnDefinition, ColumnType


PathLike = Union[str, Path]

DEFAULT_SHEET_NAME = "Data"
MAX_SHEET_NAME = 31  # Excel limit


class GridExportService:
    """Convert grid rows to/from tabular files."""

    def __init__(self, formatted: bool = False):
        """
        Args:
            formatted: Write display text (grouped numbers, YYYY-MM-DD dates)
                       instead of raw values
        """
        self._formatted = formatted

    def _exported_columns(self, columns: Iterable[ColumnDefinition]) -> List[ColumnDefinition]:
        return [c for c in display_columns(columns) if c.type != ColumnType.ACTIONS]

    def to_dataframe(self, rows: Iterable[Dict[str, Any]], columns: Iterable[ColumnDefinition]) -> pd.DataFrame:
        """One DataFrame column per displayed grid column, titled by header name."""
        cols = self._exported_columns(columns)
        records = []
        for row in rows:
            record = {}
            for col in cols:
                value = col.value_of(row)
                if self._formatted:
                    value = get_cell_strategy(col.type).format_display(value)
                record[col.header_name or col.field] = value
            records.append(record)
        return pd.DataFrame(records, columns=[c.header_name or c.field for c in cols])

    def export_csv(self, rows: Iterable[Dict[str, Any]], columns: Iterable[ColumnDefinition],
                   path: PathLike) -> Path:
        path = Path(path)
        df = self.to_dataframe(rows, columns)
        # utf-8-sig so Excel opens non-ASCII headers correctly
        df.to_csv(path, index=False, encoding='utf-8-sig')
        print(f"[export] Wrote {len(df)} rows to {path}")
        return path

    def export_excel(self, rows: Iterable[Dict[str, Any]], columns: Iterable[ColumnDefinition],
                     path: PathLike, sheet_name: str = DEFAULT_SHEET_NAME) -> Path:
        """Single-sheet workbook with a bold header row and widths taken from the columns."""
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        path = Path(path)
        cols = self._exported_columns(columns)
        df = self.to_dataframe(rows, cols)
        sheet_name = (sheet_name or DEFAULT_SHEET_NAME)[:MAX_SHEET_NAME]

        with pd.ExcelWriter(path, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            worksheet = writer.sheets[sheet_name]
            for c_idx, col in enumerate(cols, start=1):
                worksheet.cell(row=1, column=c_idx).font = Font(bold=True)
                # Pixel width -> approximate character width
                width_px = col.width or 100
                worksheet.column_dimensions[get_column_letter(c_idx)].width = max(8, width_px / 7)

        print(f"[export] Wrote {len(df)} rows to {path}")
        return path

    def import_excel(self, path: PathLike, columns: Iterable[ColumnDefinition],
                     sheet_name: Optional[Union[str, int]] = 0) -> List[Dict[str, Any]]:
        """
        Read a sheet into row dicts keyed by field.

        Column titles may be header names or field names; unknown titles
        are dropped. Empty cells become None.
        """
        columns = list(columns)
        title_to_field = {}
        for col in columns:
            title_to_field[col.field] = col.field
            if col.header_name:
                title_to_field[col.header_name] = col.field

        df = pd.read_excel(Path(path), sheet_name=sheet_name, engine='openpyxl')
        known = [title for title in df.columns if str(title) in title_to_field]
        unknown = [str(title) for title in df.columns if str(title) not in title_to_field]
        if unknown:
            print(f"[export] Ignoring unknown columns in {path}: {', '.join(unknown)}")

        df = df[known].astype(object).where(df[known].notna(), None)
        df = df.rename(columns={title: title_to_field[str(title)] for title in known})
        return df.to_dict(orient='records')
