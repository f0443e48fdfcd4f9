from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from coursepress.logger import get_logger

LOG = get_logger(__name__)


class AbstractWriter(ABC):
    """Contract for report exporters: named frames in, written file path out."""

    @abstractmethod
    def write(self, target: str | Path, sheets: Dict[str, pd.DataFrame]) -> Path:
        raise NotImplementedError


class ExcelWriter(AbstractWriter):
    """One worksheet per summary frame, header row frozen and in bold."""

    def __init__(self, max_width: int = 60) -> None:
        self.max_width = max_width

    def __str__(self) -> str:
        return f"ExcelWriter(max_width={self.max_width})"

    def column_widths(self, df: pd.DataFrame) -> list[int]:
        # widths in characters, header included, capped at max_width
        widths = []
        for name in df.columns:
            cells = [str(name)] + ["" if pd.isna(v) else str(v) for v in df[name]]
            widths.append(min(max(len(c) for c in cells) + 2, self.max_width))
        return widths

    def write(self, target: str | Path, sheets: Dict[str, pd.DataFrame]) -> Path:
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        bold = Font(bold=True)
        with pd.ExcelWriter(path, engine="openpyxl") as xw:
            for name, df in sheets.items():
                df.to_excel(xw, sheet_name=name, index=False)
                ws = xw.sheets[name]
                ws.freeze_panes = "A2"
                for cell in ws[1]:
                    cell.font = bold
                for idx, width in enumerate(self.column_widths(df), start=1):
                    ws.column_dimensions[get_column_letter(idx)].width = width
        LOG.info("Wrote %s (%s)", path, ", ".join(sheets))
        return path
