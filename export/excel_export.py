"""Excel-Export für offene Vertretungen und das Vertretungsprotokoll (openpyxl)."""

from pathlib import Path
from typing import Optional

from analysis.absence_expansion import AffectedLesson, DateRange, expand_affected_lessons
from analysis.availability import free_teachers_board
from analysis.substitution_helper import SubstitutionFinder
from config.schema import ScoringConfig
from models.school_data import SchoolData
from models.timeslot import WEEKDAYS, week_start

from export.helpers import COLORS, format_day, today_str


def _lesson_key(lesson: AffectedLesson) -> tuple:
    # eindeutig auch bei Major-Schienen (mehrere Stunden je Klasse und Slot)
    return (lesson.date, lesson.time, lesson.class_id, lesson.absent_teacher_id)


class ExcelExporter:
    """Exportiert den Vertretungsstand eines Zeitraums in eine Excel-Datei.

    Sheets:
      - "Offene Vertretungen": betroffene Stunden mit Vorschlag und Begründung
      - "Vertretungsprotokoll": alle bestätigten Vertretungen
      - "Freie Lehrkräfte": Wochenübersicht ab dem ersten Tag des Zeitraums
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_NARROW_W = 10
    COL_DEFAULT_W = 18
    COL_WIDE_W = 60

    ROW_HEADER_H = 22

    def __init__(
        self,
        school_data: SchoolData,
        scoring: Optional[ScoringConfig] = None,
        school_name: str = "",
    ):
        self.data = school_data
        self.finder = SubstitutionFinder(scoring)
        self.school_name = school_name

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path, date_range: DateRange) -> Path:
        """Erstellt die Excel-Datei mit allen Sheets und gibt den Pfad zurück."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_offen(wb, date_range)
        self._sheet_protokoll(wb)
        self._sheet_frei(wb, date_range)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_title(self, ws, title: str) -> int:
        """Überschrift + Erstellungsdatum; gibt die nächste freie Zeile zurück."""
        from openpyxl.styles import Font
        heading = f"{title} – {self.school_name}" if self.school_name else title
        ws.cell(row=1, column=1, value=heading).font = Font(bold=True, size=13)
        ws.cell(row=2, column=1, value=f"Erstellt: {today_str()}")
        return 4

    def _write_header_row(self, ws, row: int, headers: list[str], widths: list[int]) -> None:
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, (text, width) in enumerate(zip(headers, widths), 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[row].height = self.ROW_HEADER_H
        ws.freeze_panes = ws.cell(row=row + 1, column=1)

    def _write_row(self, ws, row: int, values: list, fill_color: Optional[str] = None) -> None:
        from openpyxl.styles import Alignment
        border = self._thin_border()
        fill = self._fill(fill_color) if fill_color else None
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = border
            cell.alignment = Alignment(vertical="top", wrap_text=True)
            if fill is not None:
                cell.fill = fill

    # ─── Sheets ───────────────────────────────────────────────────────────────

    def _sheet_offen(self, wb, date_range: DateRange) -> None:
        """Alle betroffenen Stunden; offene mit Vertretungsvorschlag."""
        ws = wb.create_sheet(title="Offene Vertretungen")
        row = self._write_title(
            ws,
            f"Betroffene Stunden {date_range.start.strftime('%d.%m.%Y')}"
            f" bis {date_range.end.strftime('%d.%m.%Y')}",
        )
        headers = ["Datum", "Zeit", "Klasse", "Fach", "Fehlt", "Status", "Vorschlag", "Begründung"]
        widths = [self.COL_DEFAULT_W, self.COL_NARROW_W, self.COL_NARROW_W + 4,
                  self.COL_DEFAULT_W, self.COL_DEFAULT_W, self.COL_NARROW_W + 4,
                  self.COL_DEFAULT_W, self.COL_WIDE_W]
        self._write_header_row(ws, row, headers, widths)
        row += 1

        affected = expand_affected_lessons(
            self.data.teachers, self.data.classes, self.data.substitutions,
            self.data.time_slots, date_range,
        )
        recommendations = {
            _lesson_key(lesson): rec
            for lesson, rec in self.finder.recommend_for_lessons(
                affected, self.data.teachers, self.data.classes, self.data.time_slots
            )
        }

        for lesson in affected:
            rec = recommendations.get(_lesson_key(lesson))
            if lesson.is_covered:
                status, color, proposal, reasoning = "vertreten", COLORS["covered"], "", ""
            else:
                status = "offen"
                proposal = rec.recommendation or "–"
                reasoning = rec.reasoning or ""
                color = COLORS["supervisory"] if rec.supervisory_only else COLORS["uncovered"]
            self._write_row(ws, row, [
                format_day(lesson.date), lesson.time, lesson.class_name, lesson.subject,
                lesson.absent_teacher_name, status, proposal, reasoning,
            ], color)
            row += 1

        if not affected:
            ws.cell(row=row, column=1, value="Keine betroffenen Stunden im Zeitraum.")

    def _sheet_protokoll(self, wb) -> None:
        """Bestätigte Vertretungen, neueste zuerst."""
        ws = wb.create_sheet(title="Vertretungsprotokoll")
        row = self._write_title(ws, "Vertretungsprotokoll")
        headers = ["Datum", "Zeit", "Klasse", "Fach", "Abwesend", "Vertretung", "Erfasst"]
        widths = [self.COL_DEFAULT_W, self.COL_NARROW_W, self.COL_NARROW_W + 4,
                  self.COL_DEFAULT_W, self.COL_DEFAULT_W, self.COL_DEFAULT_W,
                  self.COL_DEFAULT_W]
        self._write_header_row(ws, row, headers, widths)
        row += 1

        records = sorted(self.data.substitutions, key=lambda s: (s.date, s.time), reverse=True)
        for sub in records:
            created = sub.created_at.strftime("%d.%m.%Y %H:%M") if sub.created_at else ""
            self._write_row(ws, row, [
                format_day(sub.date), sub.time, sub.class_name or sub.class_id, sub.subject,
                sub.absent_teacher_name, sub.substitute_teacher_name, created,
            ])
            row += 1

        if not records:
            ws.cell(row=row, column=1, value="Noch keine Vertretungen erfasst.")

    def _sheet_frei(self, wb, date_range: DateRange) -> None:
        """Freie Lehrkräfte je Wochentag und Unterrichtsstunde."""
        from openpyxl.styles import Font

        ws = wb.create_sheet(title="Freie Lehrkräfte")
        first_day = week_start(date_range.start)
        row = self._write_title(ws, f"Freie Lehrkräfte ab {first_day.strftime('%d.%m.%Y')}")
        headers = ["Zeit"] + list(WEEKDAYS)
        widths = [self.COL_DEFAULT_W - 4] + [self.COL_DEFAULT_W + 6] * len(WEEKDAYS)
        self._write_header_row(ws, row, headers, widths)
        row += 1

        board = free_teachers_board(self.data.teachers, first_day, self.data.time_slots)
        for slot in self.data.lesson_slots:
            values = [f"{slot.start}–{slot.end}"]
            values += [", ".join(board[day][slot.start]) for day in WEEKDAYS]
            self._write_row(ws, row, values, COLORS["free"])
            ws.cell(row=row, column=1).font = Font(bold=True)
            row += 1
