"""Excel-Export für den Lehrplan (openpyxl)."""

from pathlib import Path
from typing import Optional, Sequence

from analysis.capacity import CapacityReport
from config.schema import PlannerConfig
from engine.calendar_resolver import overrides_by_date
from models.book import Book
from models.calendar import CalendarOverride
from models.lesson import LessonRecord
from models.owner import Owner

from export.helpers import (
    COLORS, DAY_HEADERS, build_month_grid, book_color, format_german_date,
    format_lessons, group_by_date, group_by_month, lesson_color, special_color,
    today_str,
)


class ExcelExporter:
    """Exportiert einen Lehrplan in eine Excel-Datei.

    Blätter: Übersicht, eines pro Monat (Kalenderraster ab Sonntag), Liste.
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_DAY_W   = 28
    COL_LIST_W  = (12, 8, 8, 28, 24, 10)

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22
    ROW_WEEK_H   = 80

    def __init__(
        self,
        lessons: Sequence[LessonRecord],
        owner: Owner,
        books: Sequence[Book],
        config: Optional[PlannerConfig] = None,
        overrides: Sequence[CalendarOverride] = (),
        capacity: Sequence[CapacityReport] = (),
    ):
        self.lessons   = sorted(lessons, key=lambda l: l.sort_key)
        self.owner     = owner
        self.books     = list(books)
        self.config    = config or PlannerConfig()
        self.special   = overrides_by_date(overrides, owner.id)
        self.capacity  = list(capacity)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Blättern."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)
        for month_key, month_lessons in group_by_month(self.lessons).items():
            self._sheet_monat(wb, month_key, month_lessons)
        self._sheet_liste(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _top_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="left", vertical="top")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: Sequence[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=text)
            c.fill = fill
            c.font = Font(bold=True, color="FFFFFF", size=10)
            c.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)
        border = self._thin_border()

        row = 1
        ws.cell(row=row, column=1, value=self.config.academy_name).font = Font(bold=True, size=14)
        row += 1
        ws.cell(row=row, column=1, value=f"{self.owner.name} ({self.owner.id})")
        ws.cell(row=row, column=3, value=f"Erstellt: {today_str()}")
        ws.cell(row=row, column=4, value=f"Einheiten: {len(self.lessons)}")
        row += 2

        # Bücher-Tabelle
        self._write_header(ws, row, ["Buch", "Einheiten", "Erste", "Letzte"])
        row += 1
        for book in self.books:
            own = [l for l in self.lessons if l.book_id == book.id]
            if not own:
                continue
            c = ws.cell(row=row, column=1, value=book.name)
            c.fill = self._fill(book_color(book.id, self.books))
            c.border = border
            ws.cell(row=row, column=2, value=len(own)).border = border
            ws.cell(row=row, column=3, value=own[0].content).border = border
            ws.cell(row=row, column=4, value=own[-1].content).border = border
            row += 1

        if self.capacity:
            row += 1
            ws.cell(row=row, column=1, value="Kapazität").font = Font(bold=True)
            row += 1
            self._write_header(ws, row, ["Monat", "Termine", "Plätze", "Angefragt", "Status"])
            row += 1
            for r in self.capacity:
                ws.cell(row=row, column=1, value=r.label or r.month_key).border = border
                ws.cell(row=row, column=2, value=r.dates).border = border
                ws.cell(row=row, column=3, value=r.capacity).border = border
                ws.cell(row=row, column=4, value=r.requested).border = border
                c = ws.cell(row=row, column=5, value=r.message)
                c.border = border
                if r.unplaced:
                    c.fill = self._fill("FFCCCC")
                elif r.empty_slots:
                    c.fill = self._fill("FFFFCC")
                row += 1

        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 10
        ws.column_dimensions["C"].width = 22
        ws.column_dimensions["D"].width = 22
        ws.column_dimensions["E"].width = 32

    # ─── Sheet: Monat ─────────────────────────────────────────────────────────

    def _sheet_monat(self, wb, month_key: str, month_lessons: list[LessonRecord]) -> None:
        from openpyxl.styles import Font
        from openpyxl.utils import get_column_letter

        ws = wb.create_sheet(title=month_key[:31])
        year, month = int(month_key[:4]), int(month_key[5:7]) - 1
        by_date = group_by_date(month_lessons)
        border = self._thin_border()

        self._write_header(ws, 1, DAY_HEADERS)
        for col in range(1, 8):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

        grid = build_month_grid(year, month)
        row = 2
        for week in grid:
            for col, day in enumerate(week, 1):
                c = ws.cell(row=row, column=col)
                c.border = border
                c.alignment = self._top_align()
                if day is None:
                    c.fill = self._fill(COLORS["outside"])
                    continue
                here = by_date.get(day, [])
                special = self.special.get(day)
                lines = [day[8:10] + "." + (f" {special.name}" if special and special.name else "")]
                if here:
                    lines.append(format_lessons(here, short=False))
                c.value = "\n".join(lines)
                c.font = Font(size=8)
                color = special_color(special)
                if color is None:
                    color = lesson_color(here[0], self.books) if here else COLORS["free"]
                c.fill = self._fill(color)
            ws.row_dimensions[row].height = self.ROW_WEEK_H
            row += 1

    # ─── Sheet: Liste ─────────────────────────────────────────────────────────

    def _sheet_liste(self, wb) -> None:
        from openpyxl.utils import get_column_letter
        ws = wb.create_sheet(title="Liste")
        border = self._thin_border()
        self._write_header(ws, 1, ["Datum", "Periode", "Nr.", "Buch", "Inhalt", "Art"])

        for row, l in enumerate(self.lessons, start=2):
            values = [
                format_german_date(l.date), l.period, l.display_order,
                l.book_name, l.content, l.kind.value,
            ]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
            ws.cell(row=row, column=4).fill = self._fill(lesson_color(l, self.books))

        for col, width in enumerate(self.COL_LIST_W, 1):
            ws.column_dimensions[get_column_letter(col)].width = width
