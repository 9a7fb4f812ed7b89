"""
Excel export of one simulated deal.

Sheets:
  - Parametros:      the deal inputs as stored
  - Timeline:        line items x holding periods
  - Lucro por Lance: net profit, bids x holding periods
  - ROI por Lance:   ROI %, bids x holding periods

Values are written unrounded; number formats do the 2-decimal display.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.schema import DealParameters
from engine.projection import SimulationResult

from .tables import bid_table_to_dataframe, breakdown_table

logger = logging.getLogger(__name__)

_MONEY_FORMAT = "#,##0.00"
_PERCENT_FORMAT = '0.00"%"'


def _style_sheet(ws, number_format: str) -> None:
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in ws.iter_rows(min_row=2, min_col=2):
        for cell in row:
            if isinstance(cell.value, (int, float)):
                cell.number_format = number_format
    for idx, column in enumerate(ws.columns, start=1):
        width = max(len(str(c.value)) if c.value is not None else 0 for c in column)
        ws.column_dimensions[get_column_letter(idx)].width = min(max(width + 2, 10), 40)


def export_report_xlsx(
    params: DealParameters,
    result: SimulationResult,
    path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Build the workbook in memory and return its bytes; also write it to ``path`` if given.
    """
    params_df = pd.DataFrame(
        [{"Campo": k, "Valor": v} for k, v in params.to_dict().items()]
    )
    timeline_df = breakdown_table(result.timeline)
    timeline_df.columns = [f"{m} meses" for m in timeline_df.columns]
    profit_df = bid_table_to_dataframe(result.bid_table, value="profit")
    roi_df = bid_table_to_dataframe(result.bid_table, value="roi")
    for df in (profit_df, roi_df):
        df.index.name = "Lance"
        df.columns = [f"{m} meses" for m in df.columns]

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        params_df.to_excel(writer, sheet_name="Parametros", index=False)
        timeline_df.to_excel(writer, sheet_name="Timeline")
        profit_df.to_excel(writer, sheet_name="Lucro por Lance")
        roi_df.to_excel(writer, sheet_name="ROI por Lance")

        _style_sheet(writer.sheets["Parametros"], _MONEY_FORMAT)
        _style_sheet(writer.sheets["Timeline"], _MONEY_FORMAT)
        _style_sheet(writer.sheets["Lucro por Lance"], _MONEY_FORMAT)
        _style_sheet(writer.sheets["ROI por Lance"], _PERCENT_FORMAT)

    data = buffer.getvalue()
    if path is not None:
        Path(path).write_bytes(data)
        logger.info("Wrote deal report (%d bytes) to %s", len(data), path)
    return data
