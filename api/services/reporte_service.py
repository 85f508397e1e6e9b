"""Spreadsheet reports."""

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from sqlalchemy.ext.asyncio import AsyncSession

from core.gestion_context import GestionActiva
from core.logger import get_logger
from repositories.reporte_repository import ReporteRepository

logger = get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADERS = [
    "N°",
    "Código",
    "Productor",
    "CI",
    "Organización",
    "Categoría",
    "Año ingreso",
    "Cultivo principal",
    "Superficie total (ha)",
    "Producción estimada maní (qq)",
    "Producción real maní (qq)",
]
COLUMN_WIDTHS = [6, 14, 36, 14, 32, 11, 12, 18, 20, 28, 26]

_BOLD = Font(bold=True)
_TITLE = Font(bold=True, size=14)
_HEADER_FILL = PatternFill("solid", fgColor="2E7D32")
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_THIN = Side(style="thin", color="999999")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


@dataclass(frozen=True)
class ReportFile:
    content: bytes
    filename: str
    rows: int


def productores_organicos_filename(anio: int) -> str:
    return f"Reporte_Productores_Organicos_Gestion_{anio}.xlsx"


async def build_productores_organicos(
    db: AsyncSession, gestion: GestionActiva
) -> ReportFile:
    """Active producers with their crop summary for the active period."""
    rows = await ReporteRepository(db).productores_organicos(gestion.anio)

    wb = Workbook()
    ws = wb.active
    ws.title = f"Gestión {gestion.anio}"

    last_col = get_column_letter(len(HEADERS))
    ws.merge_cells(f"A1:{last_col}1")
    ws["A1"] = "APROMAM - Reporte de Productores Orgánicos"
    ws["A1"].font = _TITLE
    ws["A1"].alignment = Alignment(horizontal="center")
    ws.merge_cells(f"A2:{last_col}2")
    ws["A2"] = f"Gestión {gestion.anio}"
    ws["A2"].font = _BOLD
    ws["A2"].alignment = Alignment(horizontal="center")
    ws["A3"] = f"Generado: {datetime.now().strftime('%d/%m/%Y %H:%M')}"

    header_row = 5
    for col, title in enumerate(HEADERS, start=1):
        cell = ws.cell(row=header_row, column=col, value=title)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _BORDER
        cell.alignment = Alignment(horizontal="center", wrap_text=True)

    total_superficie = 0.0
    total_estimada = 0.0
    total_real = 0.0
    for index, r in enumerate(rows, start=1):
        values = [
            index,
            r.codigo_productor,
            r.nombre_productor,
            r.ci_documento or "",
            f"{r.organizacion} ({r.abreviatura})",
            r.categoria,
            r.anio_ingreso_programa,
            r.cultivo_principal or "-",
            round(r.superficie_total, 2),
            round(r.produccion_estimada_mani, 2),
            round(r.produccion_real_mani, 2),
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=header_row + index, column=col, value=value)
            cell.border = _BORDER
        total_superficie += r.superficie_total
        total_estimada += r.produccion_estimada_mani
        total_real += r.produccion_real_mani

    total_row = header_row + len(rows) + 1
    ws.cell(row=total_row, column=1, value="TOTAL").font = _BOLD
    ws.merge_cells(start_row=total_row, start_column=1, end_row=total_row, end_column=8)
    for col, value in ((9, total_superficie), (10, total_estimada), (11, total_real)):
        cell = ws.cell(row=total_row, column=col, value=round(value, 2))
        cell.font = _BOLD
        cell.border = _BORDER

    for col, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col)].width = width
    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    buffer = BytesIO()
    wb.save(buffer)

    logger.info(
        "reporte.productores_organicos.built", gestion=gestion.anio, rows=len(rows)
    )
    return ReportFile(
        content=buffer.getvalue(),
        filename=productores_organicos_filename(gestion.anio),
        rows=len(rows),
    )
