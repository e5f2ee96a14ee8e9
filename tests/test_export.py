"""Tests für Hilfsfunktionen, Terminal-Renderer und Excel-Export."""

from datetime import date
from pathlib import Path

import pytest

from analysis.quality_report import QualityAnalyzer
from config.schema import SolverConfig, SwitchConfig, TimetableConfig
from data.fake_data import demo_dataset
from export.excel_export import ExcelExporter, sheet_title
from export.helpers import (
    LUNCH_LABEL,
    build_grid,
    count_consecutive_pairs,
    count_gaps,
    count_teacher_hours,
    day_date,
    format_entries,
    format_entry,
    gap_cells,
    period_labels,
    teacher_hours_per_day,
    week_label,
)
from export.tui_renderer import render_class_rows, render_table, render_teacher_rows
from solver.result import ScheduleEntry, ScheduleSolution
from solver.scheduler import generate_schedule


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def make_entry(day: int, period: int, class_id: int = 1, teacher_id: int = 1,
               subject_id: int = 1) -> ScheduleEntry:
    return ScheduleEntry(
        day=day, period=period,
        class_id=class_id, class_name={1: "Class A", 2: "Class B"}[class_id],
        subject_id=subject_id,
        subject_name={1: "Mathematics", 2: "Science", 3: "English"}[subject_id],
        teacher_id=teacher_id,
        teacher_name={1: "Alice", 2: "Bob", 3: "Carol"}[teacher_id],
    )


@pytest.fixture
def config() -> TimetableConfig:
    return TimetableConfig(periods_per_day=6, days_per_week=6, lunch_period=3,
                           week_start=date(2025, 10, 13))


@pytest.fixture
def demo():
    data = demo_dataset()
    result = generate_schedule(data, SwitchConfig(), SolverConfig())
    assert result.ok
    return data, result.solution


# ─── HELPERS ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_period_labels(self, config):
        labels = period_labels(config)
        assert labels == [(0, "1"), (1, "2"), (2, "3"), (3, LUNCH_LABEL), (4, "5"), (5, "6")]

    def test_period_labels_without_lunch(self):
        cfg = TimetableConfig(periods_per_day=3, days_per_week=1, lunch_period=None)
        assert [label for _, label in period_labels(cfg)] == ["1", "2", "3"]

    def test_week_label_and_dates(self, config):
        assert week_label(config) == "Woche ab 13.10.2025"
        assert day_date(config, 4) == date(2025, 10, 17)
        no_start = config.model_copy(update={"week_start": None})
        assert week_label(no_start) == ""
        assert day_date(no_start, 0) is None

    def test_build_grid(self):
        entries = [make_entry(0, 0), make_entry(0, 0, class_id=2), make_entry(1, 2)]
        grid = build_grid(entries)
        assert len(grid[(0, 0)]) == 2
        assert len(grid[(1, 2)]) == 1

    def test_gap_cells(self, config):
        """Freie Stunde zwischen zwei Stunden zählt, die Mittagspause nicht."""
        entries = [make_entry(0, 0), make_entry(0, 2), make_entry(1, 2), make_entry(1, 4)]
        assert gap_cells(entries, config) == {(0, 1)}
        assert count_gaps(entries, config) == 1

    def test_single_lesson_no_gap(self, config):
        assert count_gaps([make_entry(0, 5)], config) == 0

    def test_count_consecutive_pairs(self):
        entries = [
            make_entry(0, 0), make_entry(0, 1), make_entry(0, 2),
            make_entry(0, 4, class_id=2), make_entry(0, 5),
        ]
        # (0,1), (1,2) in Class A; 4/5 liegen in verschiedenen Klassen
        assert count_consecutive_pairs(entries) == 2

    def test_teacher_hours(self):
        entries = [make_entry(0, 0), make_entry(2, 1), make_entry(2, 2),
                   make_entry(0, 0, teacher_id=2, subject_id=2)]
        assert count_teacher_hours(entries, 1) == 3
        assert teacher_hours_per_day(entries, 1) == {0: 1, 2: 2}
        assert teacher_hours_per_day(entries, 3) == {}

    def test_format_entry(self):
        e = make_entry(0, 0)
        assert format_entry(e, "class") == "Mathematics\nAlice"
        assert format_entry(e, "teacher") == "Mathematics\nClass A"
        assert format_entries([]) == ""
        two = format_entries([e, make_entry(0, 0, class_id=2)], "teacher")
        assert two == "Mathematics\nClass A\n──\nMathematics\nClass B"


# ─── TUI RENDERER ─────────────────────────────────────────────────────────────

class TestTuiRenderer:
    def _solution(self, data, entries):
        return ScheduleSolution(entries=entries, switches=SwitchConfig(),
                                config_snapshot=data.config)

    def test_class_rows_shape(self, demo):
        data, solution = demo
        rows = render_class_rows(1, solution, data)
        assert len(rows) == data.config.periods_per_day
        assert all(len(r) == 1 + data.config.days_per_week for r in rows)
        assert rows[3][0] == LUNCH_LABEL
        assert set(rows[3][1:]) == {"─" * 8}

    def test_class_rows_content(self, demo):
        data, solution = demo
        rows = render_class_rows(1, solution, data)
        filled = [cell for row in rows for cell in row[1:] if cell not in ("—", "─" * 8)]
        assert len(filled) == 10

    def test_teacher_rows_mark_gaps(self):
        data = demo_dataset()
        solution = self._solution(data, [make_entry(0, 0), make_entry(0, 2)])
        rows = render_teacher_rows(1, solution, data)
        assert rows[0][1] == "Mathematics\nClass A"
        assert rows[1][1] == "↕ Springstunde"
        assert rows[2][1] == "Mathematics\nClass A"
        assert rows[4][1] == "—"

    def test_lunch_is_never_a_gap(self):
        data = demo_dataset()
        solution = self._solution(data, [make_entry(0, 2), make_entry(0, 4)])
        rows = render_teacher_rows(1, solution, data)
        assert "↕ Springstunde" not in [row[1] for row in rows]

    def test_unknown_ids(self, demo):
        data, solution = demo
        assert render_class_rows(99, solution, data) == []
        assert render_teacher_rows(99, solution, data) == []

    def test_render_table(self, demo):
        data, solution = demo
        table = render_table("Class A", render_class_rows(1, solution, data), data)
        assert table.title == "Class A"
        assert len(table.columns) == 1 + data.config.days_per_week
        assert table.row_count == data.config.periods_per_day


# ─── EXCEL EXPORT ─────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_sheets(self, demo, tmp_path: Path):
        from openpyxl import load_workbook

        data, solution = demo
        path = ExcelExporter(solution, data, "Test-Schule").export(tmp_path / "plan.xlsx")
        assert path.exists()

        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Übersicht",
            "Klasse Class A", "Klasse Class B",
            "Lehrer T-A", "Lehrer T-B", "Lehrer T-C",
        ]
        assert wb["Übersicht"]["A1"].value == "Test-Schule"

    def test_quality_sheet(self, demo, tmp_path: Path):
        from openpyxl import load_workbook

        data, solution = demo
        report = QualityAnalyzer().analyze(solution, data)
        path = ExcelExporter(solution, data).export(
            tmp_path / "sub" / "plan.xlsx", quality_report=report,
        )
        wb = load_workbook(path)
        assert wb.sheetnames[1] == "Qualität"

    def test_class_sheet_content(self, demo, tmp_path: Path):
        from openpyxl import load_workbook

        data, solution = demo
        path = ExcelExporter(solution, data).export(tmp_path / "plan.xlsx")
        ws = load_workbook(path)["Klasse Class A"]

        assert [ws.cell(row=1, column=c).value for c in range(1, 8)] == [
            "Std.", "Mo", "Di", "Mi", "Do", "Fr", "Sa",
        ]
        # Zeile 2 = Stunde 0, Mittagspause auf Zeile 5
        assert ws.cell(row=5, column=1).value == f"── {LUNCH_LABEL} ──"
        assert any(str(r) == "A5:G5" for r in ws.merged_cells.ranges)

        for e in solution.get_class_schedule(1):
            value = ws.cell(row=e.period + 2, column=e.day + 2).value
            assert value == f"{e.subject_name}\n{e.teacher_name}"

    def test_teacher_sheet_stats(self, demo, tmp_path: Path):
        from openpyxl import load_workbook

        data, solution = demo
        path = ExcelExporter(solution, data).export(tmp_path / "plan.xlsx")
        ws = load_workbook(path)["Lehrer T-B"]
        stat_row = 2 + data.config.periods_per_day + 1
        assert ws.cell(row=stat_row, column=1).value == "Limits:"
        hours = count_teacher_hours(solution.entries, 2)
        assert ws.cell(row=stat_row, column=4).value == f"{hours}h"

    def test_sheet_title_sanitized(self):
        assert sheet_title("Klasse 10/A") == "Klasse 10-A"
        assert sheet_title("Lehrer [X]:?*\\") == "Lehrer -X-----"
        assert len(sheet_title("Klasse " + "x" * 40)) == 31

    def test_names_with_forbidden_characters(self, tmp_path: Path):
        from openpyxl import load_workbook

        data = demo_dataset()
        classes = [c.model_copy(update={"name": "10/A"}) if c.id == 1 else c
                   for c in data.classes]
        teachers = [t.model_copy(update={"code": "T:B"}) if t.id == 2 else t
                    for t in data.teachers]
        data = data.model_copy(update={"classes": classes, "teachers": teachers})
        result = generate_schedule(data, SwitchConfig(), SolverConfig())
        assert result.ok

        path = ExcelExporter(result.solution, data).export(tmp_path / "plan.xlsx")
        wb = load_workbook(path)
        assert "Klasse 10-A" in wb.sheetnames
        assert "Lehrer T-B" in wb.sheetnames
