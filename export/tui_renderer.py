"""Gemeinsamer Renderer für Terminal-Stundenplan-Anzeige.

Wird von cmd_solve und cmd_show (Rich) verwendet.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from solver.result import ScheduleSolution
    from models.dataset import Dataset


def render_class_rows(
    class_id: int,
    solution: "ScheduleSolution",
    dataset: "Dataset",
) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Klassen-Stundenplan zurück.

    Jede Zeile: [stunden_label, Tag 1, Tag 2, ...]
    Die Mittagspause wird als eigene Zeile mit '─' in allen Tagen eingefügt.
    """
    from export.helpers import build_grid, format_entries, period_labels

    if class_id not in dataset.class_map():
        return []

    cfg = dataset.config
    grid = build_grid(solution.get_class_schedule(class_id))
    rows: list[list[str]] = []

    for period, label in period_labels(cfg):
        if period == cfg.lunch_period:
            rows.append([label] + ["─" * 8] * cfg.days_per_week)
            continue
        cells = [label]
        for day in range(cfg.days_per_week):
            entries = grid.get((day, period))
            cells.append(format_entries(entries, "class") if entries else "—")
        rows.append(cells)

    return rows


def render_teacher_rows(
    teacher_id: int,
    solution: "ScheduleSolution",
    dataset: "Dataset",
) -> list[list[str]]:
    """Gibt Tabellenzeilen für den Lehrer-Stundenplan zurück.

    Springstunden werden als 'Springstunde' markiert.
    """
    from export.helpers import build_grid, format_entries, gap_cells, period_labels

    if teacher_id not in dataset.teacher_map():
        return []

    cfg = dataset.config
    entries = solution.get_teacher_schedule(teacher_id)
    grid = build_grid(entries)
    gaps = gap_cells(entries, cfg)
    rows: list[list[str]] = []

    for period, label in period_labels(cfg):
        if period == cfg.lunch_period:
            rows.append([label] + ["─" * 8] * cfg.days_per_week)
            continue
        cells = [label]
        for day in range(cfg.days_per_week):
            cell_entries = grid.get((day, period))
            if cell_entries:
                cells.append(format_entries(cell_entries, "teacher"))
            elif (day, period) in gaps:
                cells.append("↕ Springstunde")
            else:
                cells.append("—")
        rows.append(cells)

    return rows


def render_table(
    title: str,
    rows: list[list[str]],
    dataset: "Dataset",
):
    """Baut eine Rich-Table aus den Zeilen von render_*_rows."""
    from rich.table import Table
    from rich import box

    cfg = dataset.config
    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Std.", style="bold", width=7)
    for day in range(cfg.days_per_week):
        table.add_column(cfg.day_name(day), width=14)
    for row in rows:
        table.add_row(*row)
    return table
