"""Excel-Export für den Stundenplan (openpyxl)."""

from pathlib import Path

from models.dataset import Dataset
from models.school_class import SchoolClass
from models.teacher import Teacher
from solver.result import ScheduleEntry, ScheduleSolution

from export.helpers import (
    COLORS, build_grid, count_gaps, count_teacher_hours, format_entries,
    gap_cells, period_labels, today_str, week_label,
)

# Zeichen, die Excel in Blattnamen nicht zulässt
_INVALID_TITLE_CHARS = str.maketrans({c: "-" for c in "/\\?*[]:"})


def sheet_title(text: str) -> str:
    """Excel-tauglicher Blattname: verbotene Zeichen ersetzt, max. 31 Zeichen."""
    return text.translate(_INVALID_TITLE_CHARS)[:31]


class ExcelExporter:
    """Exportiert eine ScheduleSolution in eine Excel-Datei.

    Sheets: Übersicht, optional Qualität, je Klasse ein Blatt, je Lehrkraft
    ein Blatt.
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_STD_W  = 8
    COL_DAY_W  = 20

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H  = 22
    ROW_LESSON_H  = 36
    ROW_LUNCH_H   = 12

    def __init__(
        self,
        solution: ScheduleSolution,
        dataset: Dataset,
        school_name: str = "Stundenplan",
    ):
        self.solution    = solution
        self.data        = dataset
        self.config      = dataset.config
        self.school_name = school_name
        self.days        = list(range(self.config.days_per_week))

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path, quality_report=None) -> Path:
        """Erstellt die Excel-Datei mit allen Sheets und gibt den Pfad zurück.

        quality_report: optionaler ScheduleQualityReport – wenn angegeben,
        wird ein zusätzliches Qualitätsblatt eingefügt.
        """
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_uebersicht(wb)

        if quality_report is not None:
            self._sheet_qualitaet(wb, quality_report)

        for cls in sorted(self.data.classes, key=lambda c: c.id):
            self._sheet_klasse(wb, cls)

        for teacher in sorted(self.data.teachers, key=lambda t: t.id):
            self._sheet_lehrer(wb, teacher)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _setup_sheet(self, ws) -> None:
        """Setzt Spaltenbreiten für ein Tabellenblatt."""
        from openpyxl.utils import get_column_letter
        ws.column_dimensions["A"].width = self.COL_STD_W
        for col in range(2, 2 + len(self.days)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

    def _write_header_row(self, ws) -> None:
        """Schreibt die Kopfzeile (Std. | Mo | Di | …)."""
        from openpyxl.styles import Font
        headers = ["Std."] + [self.config.day_name(d) for d in self.days]
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[1].height = self.ROW_HEADER_H

    def _write_table_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill_h = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, h in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=h)
            c.fill = fill_h
            c.font = Font(bold=True, color="FFFFFF")
            c.border = border

    # ─── Zeitraster-Tabelle ───────────────────────────────────────────────────

    def _write_schedule_table(
        self, ws, entries: list[ScheduleEntry], mode: str,
    ) -> int:
        """Schreibt das Raster mit Inhalten; gibt die nächste freie Excel-Zeile zurück.

        mode: 'class' | 'teacher'
        Im Lehrerplan werden Springstunden rot hinterlegt.
        """
        from openpyxl.styles import Font

        grid = build_grid(entries)
        gaps = gap_cells(entries, self.config) if mode == "teacher" else set()
        border = self._thin_border()

        excel_row = 2   # Zeile 1 = Header
        for period, label in period_labels(self.config):
            if period == self.config.lunch_period:
                ws.merge_cells(
                    start_row=excel_row, start_column=1,
                    end_row=excel_row, end_column=1 + len(self.days),
                )
                c = ws.cell(row=excel_row, column=1, value=f"── {label} ──")
                c.fill = self._fill(COLORS["lunch"])
                c.alignment = self._center_align(wrap=False)
                c.font = Font(italic=True, size=8, color="666666")
                ws.row_dimensions[excel_row].height = self.ROW_LUNCH_H
                excel_row += 1
                continue

            c = ws.cell(row=excel_row, column=1, value=label)
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(bold=True, size=9)

            for day in self.days:
                here = grid.get((day, period), [])
                if here:
                    color = COLORS["lesson"]
                elif (day, period) in gaps:
                    color = COLORS["gap"]
                else:
                    color = COLORS["free"]
                c = ws.cell(row=excel_row, column=day + 2, value=format_entries(here, mode))
                c.fill = self._fill(color)
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8)

            ws.row_dimensions[excel_row].height = self.ROW_LESSON_H
            excel_row += 1

        return excel_row

    # ─── Sheet: Übersicht ─────────────────────────────────────────────────────

    def _sheet_uebersicht(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)

        row = 1
        ws.cell(row=row, column=1, value=self.school_name).font = Font(bold=True, size=14)
        row += 1
        ws.cell(row=row, column=1, value=f"Erstellt: {today_str()}")
        ws.cell(row=row, column=2, value=week_label(self.config))
        ws.cell(row=row, column=3, value=f"Status: {self.solution.solver_status}")
        ws.cell(row=row, column=4, value=f"Zeit: {self.solution.solve_time_seconds:.2f}s")
        ws.cell(row=row, column=5, value=f"Platzierungen: {self.solution.steps}")
        row += 2

        self._write_table_header(
            ws, row, ["Kürzel", "Name", "Max/Tag", "Max/Woche", "Ist", "Springstd."]
        )
        border = self._thin_border()
        row += 1

        for teacher in sorted(self.data.teachers, key=lambda t: t.id):
            actual = count_teacher_hours(self.solution.entries, teacher.id)
            t_entries = self.solution.get_teacher_schedule(teacher.id)

            ws.cell(row=row, column=1, value=teacher.code).border = border
            ws.cell(row=row, column=2, value=teacher.name).border = border
            ws.cell(row=row, column=3, value=teacher.max_per_day).border = border
            ws.cell(row=row, column=4, value=teacher.max_per_week).border = border
            c_ist = ws.cell(row=row, column=5, value=actual)
            c_ist.border = border
            if actual > teacher.max_per_week:
                c_ist.fill = self._fill("FFCCCC")
            ws.cell(row=row, column=6, value=count_gaps(t_entries, self.config)).border = border
            row += 1

        row += 1

        # Alle Einträge als flache Liste
        ws.cell(row=row, column=1, value="Alle Stunden").font = Font(bold=True)
        row += 1
        self._write_table_header(ws, row, ["Tag", "Std.", "Klasse", "Fach", "Lehrkraft"])
        row += 1
        for e in self.solution.sorted_entries():
            ws.cell(row=row, column=1, value=self.config.day_name(e.day)).border = border
            ws.cell(row=row, column=2, value=e.period + 1).border = border
            ws.cell(row=row, column=3, value=e.class_name).border = border
            ws.cell(row=row, column=4, value=e.subject_name).border = border
            ws.cell(row=row, column=5, value=e.teacher_name).border = border
            row += 1

        ws.column_dimensions["A"].width = 10
        ws.column_dimensions["B"].width = 24
        ws.column_dimensions["C"].width = 18
        ws.column_dimensions["D"].width = 18
        ws.column_dimensions["E"].width = 18
        ws.column_dimensions["F"].width = 12

    # ─── Sheet: Klasse ────────────────────────────────────────────────────────

    def _sheet_klasse(self, wb, cls: SchoolClass) -> None:
        title = sheet_title(f"Klasse {cls.name}")
        ws = wb.create_sheet(title=title)
        self._setup_sheet(ws)
        self._write_header_row(ws)
        entries = self.solution.get_class_schedule(cls.id)
        self._write_schedule_table(ws, entries, mode="class")

    # ─── Sheet: Lehrer ────────────────────────────────────────────────────────

    def _sheet_lehrer(self, wb, teacher: Teacher) -> None:
        title = sheet_title(f"Lehrer {teacher.code or teacher.id}")
        ws = wb.create_sheet(title=title)
        self._setup_sheet(ws)
        self._write_header_row(ws)
        entries = self.solution.get_teacher_schedule(teacher.id)
        last_row = self._write_schedule_table(ws, entries, mode="teacher")

        # Stat-Box unter dem Raster
        from openpyxl.styles import Font
        actual = count_teacher_hours(self.solution.entries, teacher.id)
        last_row += 1
        ws.cell(row=last_row, column=1, value="Limits:").font = Font(bold=True)
        ws.cell(row=last_row, column=2,
                value=f"Tag: {teacher.max_per_day}h | Woche: {teacher.max_per_week}h")
        ws.cell(row=last_row, column=3, value="Ist:").font = Font(bold=True)
        ws.cell(row=last_row, column=4, value=f"{actual}h")
        ws.cell(row=last_row, column=5, value="Springstunden:").font = Font(bold=True)
        ws.cell(row=last_row, column=6, value=str(count_gaps(entries, self.config)))

    # ─── Sheet: Qualität ──────────────────────────────────────────────────────

    def _sheet_qualitaet(self, wb, report) -> None:
        """Erstellt ein Qualitätsblatt mit KPI-Block und Lehrer-Tabelle."""
        from openpyxl.styles import Font

        ws = wb.create_sheet(title="Qualität")
        border = self._thin_border()
        row = 1

        ws.cell(row=row, column=1, value="Qualitätsbericht").font = Font(bold=True, size=13)
        row += 1
        ws.cell(row=row, column=1, value=f"Erstellt: {today_str()}")
        ws.cell(row=row, column=3, value=f"Status: {report.solver_status}")
        ws.cell(row=row, column=4, value=f"Zeit: {report.solve_time}s")
        row += 2

        self._write_table_header(ws, row, ["KPI", "Wert", "Bewertung"])
        row += 1

        kpis = [
            ("Gesamt-Springstunden", str(report.total_gaps),
             "gut" if report.total_gaps < 10 else "mittel" if report.total_gaps < 30 else "hoch"),
            ("Ø Springstunden/Lehrer", f"{report.avg_gaps_per_teacher:.1f}",
             "gut" if report.avg_gaps_per_teacher < 2 else "mittel"),
            ("Auslastungs-Fairness (Jain)", f"{report.load_fairness_index:.4f}",
             "gut" if report.load_fairness_index >= 0.95 else "mittel"),
            ("Folgestunden-Paare", str(report.consecutive_pairs),
             "gut" if report.consecutive_pairs == 0 else "mittel"),
        ]
        for name, value, rating in kpis:
            ws.cell(row=row, column=1, value=name).border = border
            ws.cell(row=row, column=2, value=value).border = border
            ws.cell(row=row, column=3, value=rating).border = border
            row += 1

        row += 2

        ws.cell(row=row, column=1, value="Lehrer-Auslastung").font = Font(bold=True, size=11)
        row += 1
        self._write_table_header(
            ws, row, ["ID", "Name", "Ist", "Max", "Auslastung", "Gaps", "Freie Tage"]
        )
        row += 1

        for m in sorted(report.teacher_metrics, key=lambda x: x.teacher_id):
            ws.cell(row=row, column=1, value=m.teacher_id).border = border
            ws.cell(row=row, column=2, value=m.name).border = border
            c_ist = ws.cell(row=row, column=3, value=m.actual_hours)
            c_ist.border = border
            if m.actual_hours > m.max_per_week:
                c_ist.fill = self._fill("FFCCCC")
            ws.cell(row=row, column=4, value=m.max_per_week).border = border
            ws.cell(row=row, column=5, value=f"{m.utilization:.0%}").border = border
            ws.cell(row=row, column=6, value=m.gaps_total).border = border
            ws.cell(row=row, column=7, value=m.free_days).border = border
            row += 1

        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 24
        for col in "CDEFG":
            ws.column_dimensions[col].width = 10
