import io
import json
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from models.audit_log import AuditLog

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")


class ExcelExporter:
    """
    Экспорт данных в Excel-файлы.
    """

    @staticmethod
    def _style_header(ws, column_count: int):
        for col_num in range(1, column_count + 1):
            cell = ws.cell(row=1, column=col_num)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = HEADER_ALIGNMENT

    @staticmethod
    def _fit_columns(ws):
        # Автоподбор ширины колонок
        for col in ws.columns:
            col_letter = get_column_letter(col[0].column)
            max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in col)
            ws.column_dimensions[col_letter].width = min(max_length + 2, 50)

    @staticmethod
    def export_audit_logs(entries: list[AuditLog]) -> io.BytesIO:
        """
        Audit log as an .xlsx workbook, one row per entry, newest first
        (in whatever order ``entries`` come in).
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Audit Logs"

        headers = ["ID", "Admin ID", "Admin", "Action", "Resource", "Resource ID",
                   "Details", "IP", "User Agent", "Timestamp"]
        ws.append(headers)
        ExcelExporter._style_header(ws, len(headers))

        for entry in entries:
            ws.append([
                entry.id,
                entry.admin_id,
                entry.admin.email if entry.admin else "",
                entry.action,
                entry.resource,
                entry.resource_id if entry.resource_id is not None else "",
                json.dumps(entry.details, ensure_ascii=False) if entry.details else "",
                entry.ip_address,
                entry.user_agent or "",
                entry.created_at.strftime("%Y-%m-%d %H:%M:%S") if entry.created_at else "",
            ])

        ExcelExporter._fit_columns(ws)

        output = io.BytesIO()
        wb.save(output)
        output.seek(0)
        return output
