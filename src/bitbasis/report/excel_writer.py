"""ExcelWriter: builds the realized-gains workbook with openpyxl."""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from bitbasis.report.data_collector import ReportData

# (sheet_name, headers, data_attr, number_formats keyed by 0-based column)
SHEET_DEFS: list[tuple[str, list[str], str, dict[int, str]]] = [
    (
        "summary",
        ["Metric", "Value"],
        "summary",
        {},
    ),
    (
        "realized_gains",
        [
            "Date Acquired", "Date Sold", "Quantity (BTC)", "Proceeds (USD)",
            "Cost Basis (USD)", "Gain/Loss (USD)", "Holding Days", "Term",
        ],
        "realized_gains",
        {2: "#,##0.00000000", 3: "$#,##0.00", 4: "$#,##0.00", 5: "$#,##0.00"},
    ),
    (
        "open_lots",
        ["Date Acquired", "Quantity (BTC)", "Remaining (BTC)", "Cost Basis/Unit (USD)", "Remaining Cost (USD)"],
        "open_lots",
        {1: "#,##0.00000000", 2: "#,##0.00000000", 3: "$#,##0.00", 4: "$#,##0.00"},
    ),
]

HEADER_FONT = Font(bold=True)
DATE_FORMAT = "yyyy-mm-dd"


class ExcelWriter:
    """Writes ReportData to an in-memory Excel buffer."""

    def write_to_buffer(self, data: ReportData) -> BytesIO:
        wb = Workbook()

        for idx, (sheet_name, headers, data_attr, num_fmts) in enumerate(SHEET_DEFS):
            if idx == 0:
                ws = wb.active
                ws.title = sheet_name
            else:
                ws = wb.create_sheet(title=sheet_name)

            for col_idx, header in enumerate(headers, start=1):
                cell = ws.cell(row=1, column=col_idx, value=header)
                cell.font = HEADER_FONT

            for row_idx, row in enumerate(getattr(data, data_attr, []), start=2):
                for col_idx, value in enumerate(row, start=1):
                    cell = ws.cell(row=row_idx, column=col_idx, value=value)
                    fmt = num_fmts.get(col_idx - 1)
                    if fmt:
                        cell.number_format = fmt
                    elif cell.is_date:
                        cell.number_format = DATE_FORMAT

            _auto_fit_columns(ws)

        buf = BytesIO()
        wb.save(buf)
        buf.seek(0)
        return buf


def _auto_fit_columns(ws) -> None:
    """Approximate column widths from content length, capped at 50."""
    for col_cells in ws.columns:
        max_len = max((len(str(c.value)) for c in col_cells if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col_cells[0].column)].width = min(max_len + 3, 50)
