"""
justscan/utils/reports.py
-----------------
Entry history exports (CSV, Excel, PDF). Each builder takes the rows
returned by the entry history query and returns a BytesIO ready for send_file.
"""

import csv
import io

from openpyxl import Workbook
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

HEADERS = ["Roll No", "Name", "Hostel", "Status", "Leaving Time", "Arrival Time", "Destination"]


def _fmt_time(value):
    return value.strftime("%Y-%m-%d %H:%M") if value else ""


def entry_row(entry):
    student = entry.get("student") or {}
    return [
        student.get("roll_no", ""),
        student.get("name", ""),
        student.get("hostel_name", ""),
        entry.get("status", ""),
        _fmt_time(entry.get("leaving_time")),
        _fmt_time(entry.get("arrival_time")),
        entry.get("destination", ""),
    ]


# ---------------- Export CSV ----------------
def build_csv(entries):
    si = io.StringIO()
    cw = csv.writer(si)
    cw.writerow(HEADERS)
    for entry in entries:
        cw.writerow(entry_row(entry))

    output = io.BytesIO()
    output.write(si.getvalue().encode("utf-8"))
    output.seek(0)
    return output


# ---------------- Export Excel ----------------
def build_excel(entries):
    wb = Workbook()
    ws = wb.active
    ws.title = "Entries"
    ws.append(HEADERS)
    for entry in entries:
        ws.append(entry_row(entry))

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output


# ---------------- Export PDF ----------------
PDF_COLUMNS = [40, 95, 205, 285, 330, 420, 505]


def build_pdf(entries, organization_name):
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    y = height - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(40, y, f"Entry Report - {organization_name}")
    y -= 30

    def draw_header(y):
        c.setFont("Helvetica-Bold", 9)
        for x, title in zip(PDF_COLUMNS, HEADERS):
            c.drawString(x, y, title)
        c.setFont("Helvetica", 9)
        return y - 18

    y = draw_header(y)
    for entry in entries:
        if y < 50:
            c.showPage()
            y = draw_header(height - 50)
        for x, value in zip(PDF_COLUMNS, entry_row(entry)):
            c.drawString(x, y, str(value)[:22])
        y -= 16

    c.save()
    buffer.seek(0)
    return buffer


EXPORTS = {
    "csv": ("text/csv", "entries.csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "entries.xlsx"),
    "pdf": ("application/pdf", "entries.pdf"),
}
