"""Stundenplan-Backtracking — Haupt-CLI.

Verwendung:
  python main.py config init              Standard-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py seed                     Demo-Datensatz speichern
  python main.py generate                 Zufalls-Datensatz erzeugen
  python main.py import <datei.json>      JSON der Browser-Oberfläche importieren
  python main.py export-legacy            Datensatz im Browser-Format schreiben
  python main.py validate                 Machbarkeits-Check
  python main.py solve                    Stundenplan berechnen
  python main.py show                     Gespeicherte Lösung anzeigen
  python main.py export                   Gespeicherte Lösung als Excel
  python main.py diagnose                 Regeln schrittweise lockern
  python main.py scenario save <name>     Szenario speichern
  python main.py scenario load <name>     Szenario laden
  python main.py scenario list            Szenarien auflisten
  python main.py scenario delete <name>   Szenario löschen

  -v / -vv vor dem Befehl: Log-Level INFO / DEBUG
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfade für Datensatz und Lösung
DEFAULT_DATA_JSON = Path("output/dataset.json")
DEFAULT_SOLUTION_JSON = Path("output/solution.json")


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config():
    """Lädt die Konfiguration (Default, falls keine Datei existiert)."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_dataset_or_abort(json_path: str):
    """Lädt den Datensatz oder bricht mit Fehlermeldung ab."""
    from models.dataset import Dataset

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py seed[/bold], "
            "[bold]generate[/bold] oder [bold]import[/bold]."
        )
        sys.exit(1)
    console.print(f"[bold]Lade Datensatz:[/bold] {p}")
    return Dataset.load_json(p)


def _load_solution_or_abort(solution_path: str):
    from solver.result import ScheduleSolution

    p = Path(solution_path)
    if not p.exists():
        console.print(
            f"[red]Keine Lösung gefunden: {p}[/red]\n"
            "Führen Sie zunächst [bold]python main.py solve[/bold] aus."
        )
        sys.exit(1)
    return ScheduleSolution.load_json(p)


def _print_grids(solution, dataset, class_ids=None, teacher_ids=None) -> None:
    """Gibt Klassen- und Lehrerpläne als Rich-Tabellen aus."""
    from export.helpers import week_label
    from export.tui_renderer import render_class_rows, render_table, render_teacher_rows

    suffix = week_label(dataset.config)
    suffix = f" – {suffix}" if suffix else ""
    for cls in dataset.classes:
        if class_ids is not None and cls.id not in class_ids:
            continue
        rows = render_class_rows(cls.id, solution, dataset)
        console.print(render_table(f"{cls.name}{suffix}", rows, dataset))
    for teacher in dataset.teachers:
        if teacher_ids is None or teacher.id not in teacher_ids:
            continue
        rows = render_teacher_rows(teacher.id, solution, dataset)
        console.print(render_table(f"{teacher.name} ({teacher.code}){suffix}", rows, dataset))


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
def config_init(force: bool):
    """Schreibt die Standard-Konfiguration als YAML."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {mgr.DEFAULT_CONFIG}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        return
    path = mgr.save(default_app_config())
    console.print(f"[green]✓[/green] Konfiguration gespeichert: {path}")


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config()
    source = "Datei" if not mgr.first_run_check() else "Standard (keine Datei)"

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  Quelle: {source}",
        title="Konfiguration",
        border_style="cyan",
    ))

    tt = config.timetable
    table = Table(title="Wochenraster", box=box.ROUNDED)
    table.add_column("Parameter")
    table.add_column("Wert")
    table.add_row("Stunden pro Tag", str(tt.periods_per_day))
    table.add_row("Tage pro Woche", str(tt.days_per_week))
    table.add_row(
        "Mittagspause (Index)",
        str(tt.lunch_period) if tt.lunch_period is not None else "—",
    )
    table.add_row("Wochenbeginn", str(tt.week_start or "—"))
    table.add_row("Tage", ", ".join(tt.day_names[:tt.days_per_week]))
    console.print(table)

    for err in tt.validation_errors():
        console.print(f"[red]• {err}[/red]")

    table2 = Table(title="Regeln", box=box.ROUNDED)
    table2.add_column("Schalter")
    table2.add_column("Aktiv")
    for name, value in config.switches.model_dump().items():
        table2.add_row(name, "[green]ja[/green]" if value else "[red]nein[/red]")
    console.print(table2)

    sc = config.solver
    console.print(
        f"[bold]Such-Budget:[/bold] max_steps={sc.max_steps} | "
        f"time_limit_seconds={sc.time_limit_seconds}"
    )


# ─── SEED / GENERATE ──────────────────────────────────────────────────────────

@click.command("seed")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für den Datensatz.")
def cmd_seed(json_path: str):
    """Speichert den Demo-Datensatz (3 Lehrkräfte, 3 Fächer, 2 Klassen)."""
    from data.fake_data import demo_dataset, print_dataset_summary

    mgr, config = _load_config()
    data = demo_dataset(week_start=config.timetable.week_start)
    print_dataset_summary(data, title="Demo-Datensatz")

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {out_path}")


@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--teachers", "num_teachers", default=8, show_default=True,
              help="Anzahl Lehrkräfte.")
@click.option("--classes", "num_classes", default=3, show_default=True,
              help="Anzahl Klassen.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für den Datensatz.")
def cmd_generate(seed: int, num_teachers: int, num_classes: int, json_path: str):
    """Erzeugt einen zufälligen Datensatz."""
    from data.fake_data import DatasetGenerator

    mgr, config = _load_config()
    console.print("[bold]Testdaten werden generiert...[/bold]")
    gen = DatasetGenerator(config.timetable, seed=seed)
    data = gen.generate(num_teachers=num_teachers, num_classes=num_classes)
    gen.print_summary(data)

    console.print(f"\n[dim]{data.summary()}[/dim]")
    data.validate_feasibility().print_rich()

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {out_path}")


# ─── IMPORT / EXPORT (Browser-Format) ────────────────────────────────────────

@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für den konvertierten Datensatz.")
def cmd_import(datei: Path, json_path: str):
    """Importiert eine JSON-Datei der Browser-Oberfläche."""
    from data.legacy_import import import_legacy_json

    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        data, report = import_legacy_json(datei)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red bold]Import fehlgeschlagen:[/red bold]\n{e}")
        sys.exit(1)

    console.print("[green]✓[/green] Import erfolgreich!")
    console.print(f"\n{data.summary()}")
    report.print_rich()

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] Daten gespeichert: {out_path}")


@click.command("export-legacy")
@click.argument("ziel", type=click.Path(path_type=Path))
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum Datensatz.")
def cmd_export_legacy(ziel: Path, json_path: str):
    """Schreibt den Datensatz im JSON-Format der Browser-Oberfläche."""
    from data.legacy_import import export_legacy_json

    data = _load_dataset_or_abort(json_path)
    path = export_legacy_json(data, ziel)
    console.print(f"[green]✓[/green] Gespeichert: {path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zur gespeicherten JSON-Datei.")
def cmd_validate(json_path: str):
    """Führt einen Machbarkeits-Check auf dem aktuellen Datensatz durch."""
    data = _load_dataset_or_abort(json_path)

    console.print(f"\n{data.summary()}\n")
    report = data.validate_feasibility()
    report.print_rich()

    sys.exit(0 if report.is_feasible else 1)


# ─── SOLVE ────────────────────────────────────────────────────────────────────

@click.command("solve")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum Datensatz.")
@click.option("--no-availability", is_flag=True, default=False,
              help="Verfügbarkeit der Lehrkräfte ignorieren.")
@click.option("--allow-double-booking", is_flag=True, default=False,
              help="Lehrkräfte dürfen gleichzeitig in mehreren Klassen sein.")
@click.option("--allow-consecutive", is_flag=True, default=False,
              help="Folgestunden-Regel abschalten.")
@click.option("--no-balance", is_flag=True, default=False,
              help="Lehrkräfte nicht nach Wochenlast sortieren.")
@click.option("--max-steps", type=int, default=None,
              help="Max. Platzierungen (überschreibt Config).")
@click.option("--time-limit", type=float, default=None,
              help="Zeitlimit in Sekunden (überschreibt Config).")
@click.option("--teachers", "show_teachers", is_flag=True, default=False,
              help="Zusätzlich alle Lehrerpläne anzeigen.")
@click.option("--quality", is_flag=True, default=False,
              help="Qualitätsbericht anzeigen.")
@click.option("--save-json", "solution_path", default=str(DEFAULT_SOLUTION_JSON),
              help="Pfad für die Lösung (JSON).")
@click.option("--excel", "excel_path", default=None,
              help="Zusätzlich als Excel-Datei speichern.")
def cmd_solve(
    json_path: str,
    no_availability: bool,
    allow_double_booking: bool,
    allow_consecutive: bool,
    no_balance: bool,
    max_steps: Optional[int],
    time_limit: Optional[float],
    show_teachers: bool,
    quality: bool,
    solution_path: str,
    excel_path: Optional[str],
):
    """Berechnet den Stundenplan per Backtracking."""
    from analysis.solution_validator import SolutionValidator
    from solver.errors import ErrorKind
    from solver.scheduler import generate_schedule

    mgr, config = _load_config()
    data = _load_dataset_or_abort(json_path)

    switches = config.switches.model_copy(update={
        k: False for k, off in (
            ("honor_availability", no_availability),
            ("no_double_booking", allow_double_booking),
            ("avoid_consecutive", allow_consecutive),
            ("balance_teacher_load", no_balance),
        ) if off
    })
    budget = config.solver.model_copy(update={
        k: v for k, v in (
            ("max_steps", max_steps),
            ("time_limit_seconds", time_limit),
        ) if v is not None
    })

    console.print(f"\n[dim]{data.summary()}[/dim]\n")
    with console.status("[bold]Suche läuft...[/bold]"):
        result = generate_schedule(data, switches, budget)

    if not result.ok:
        console.print(Panel(
            f"[red bold]{result.error.message}[/red bold]\n"
            f"[dim]Art: {result.error_kind.value}[/dim]",
            title="Kein Stundenplan",
            border_style="red",
        ))
        if result.error_kind == ErrorKind.INFEASIBLE:
            console.print(
                "Tipp: [bold]--allow-consecutive[/bold], [bold]--no-availability[/bold] "
                "oder [bold]python main.py diagnose[/bold] ausprobieren."
            )
        elif result.error_kind == ErrorKind.SEARCH_ABORTED:
            console.print("Tipp: [bold]--max-steps[/bold] / [bold]--time-limit[/bold] erhöhen.")
        sys.exit(1)

    solution = result.solution
    console.print(
        f"[green]✓[/green] {len(solution.entries)} Stunden verplant | "
        f"{solution.steps} Platzierungen | {solution.solve_time_seconds:.3f}s"
    )

    teacher_ids = {t.id for t in data.teachers} if show_teachers else None
    _print_grids(solution, data, teacher_ids=teacher_ids)

    SolutionValidator().validate(solution, data).print_rich()

    report = None
    if quality or excel_path:
        from analysis.quality_report import QualityAnalyzer
        analyzer = QualityAnalyzer()
        report = analyzer.analyze(solution, data)
        if quality:
            analyzer.print_rich(report)

    out_path = Path(solution_path)
    solution.save_json(out_path)
    console.print(f"[green]✓[/green] Lösung gespeichert: {out_path}")

    if excel_path:
        from export.excel_export import ExcelExporter
        path = ExcelExporter(solution, data, config.school_name).export(
            Path(excel_path), quality_report=report,
        )
        console.print(f"[green]✓[/green] Excel gespeichert: {path}")


# ─── SHOW / EXPORT ────────────────────────────────────────────────────────────

@click.command("show")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum Datensatz.")
@click.option("--solution", "solution_path", default=str(DEFAULT_SOLUTION_JSON),
              help="Pfad zur gespeicherten Lösung.")
@click.option("--class-id", "class_ids", type=int, multiple=True,
              help="Nur diese Klasse(n) anzeigen.")
@click.option("--teacher-id", "teacher_ids", type=int, multiple=True,
              help="Lehrerplan anzeigen.")
def cmd_show(json_path: str, solution_path: str, class_ids, teacher_ids):
    """Zeigt eine gespeicherte Lösung als Raster an."""
    data = _load_dataset_or_abort(json_path)
    solution = _load_solution_or_abort(solution_path)
    # Ohne Filter: alle Klassen; nur --teacher-id: keine Klassen
    _print_grids(
        solution, data,
        class_ids=set(class_ids) if class_ids or teacher_ids else None,
        teacher_ids=set(teacher_ids) if teacher_ids else None,
    )


@click.command("export")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum Datensatz.")
@click.option("--solution", "solution_path", default=str(DEFAULT_SOLUTION_JSON),
              help="Pfad zur gespeicherten Lösung.")
@click.option("--output", "-o", default="output/stundenplan.xlsx",
              help="Ausgabepfad der Excel-Datei.")
def cmd_export(json_path: str, solution_path: str, output: str):
    """Exportiert eine gespeicherte Lösung als Excel (mit Qualitätsblatt)."""
    from analysis.quality_report import QualityAnalyzer
    from export.excel_export import ExcelExporter

    mgr, config = _load_config()
    data = _load_dataset_or_abort(json_path)
    solution = _load_solution_or_abort(solution_path)
    report = QualityAnalyzer().analyze(solution, data)
    path = ExcelExporter(solution, data, config.school_name).export(
        Path(output), quality_report=report,
    )
    console.print(f"[green]✓[/green] Excel gespeichert: {path}")


# ─── DIAGNOSE ─────────────────────────────────────────────────────────────────

@click.command("diagnose")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum Datensatz.")
@click.option("--max-steps", type=int, default=200_000, show_default=True,
              help="Schrittlimit pro Lauf.")
def cmd_diagnose(json_path: str, max_steps: int):
    """Findet heraus, welche Regel-Lockerung einen Plan ermöglicht."""
    from solver.constraint_relaxer import ConstraintRelaxer

    mgr, config = _load_config()
    data = _load_dataset_or_abort(json_path)
    with console.status("[bold]Diagnose läuft...[/bold]"):
        report = ConstraintRelaxer(data, config.switches).diagnose(max_steps=max_steps)
    report.print_rich()


# ─── SCENARIO ─────────────────────────────────────────────────────────────────

@click.group("scenario")
def cmd_scenario():
    """Szenarien verwalten (speichern, laden, auflisten, löschen)."""


@cmd_scenario.command("save")
@click.argument("name")
@click.option("--description", "-d", default="", help="Beschreibung des Szenarios.")
def scenario_save(name: str, description: str):
    """Speichert die aktuelle Konfiguration als Szenario."""
    mgr, config = _load_config()
    path = mgr.save_scenario(config, name, description)
    console.print(f"[green]✓[/green] Szenario gespeichert: {path}")


@cmd_scenario.command("load")
@click.argument("name")
def scenario_load(name: str):
    """Lädt ein gespeichertes Szenario als aktive Konfiguration."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_scenario(name)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    mgr.save(config)
    console.print(f"[green]✓[/green] Szenario '{name}' als aktive Config gesetzt.")


@cmd_scenario.command("list")
def scenario_list():
    """Listet alle gespeicherten Szenarien auf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    scenarios = mgr.list_scenarios()

    if not scenarios:
        console.print("[dim]Keine Szenarien vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Szenarien", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Erstellt")
    table.add_column("Beschreibung")
    for s in scenarios:
        table.add_row(s.name, s.created, s.description)
    console.print(table)


@cmd_scenario.command("delete")
@click.argument("name")
def scenario_delete(name: str):
    """Löscht ein gespeichertes Szenario."""
    from config.manager import ConfigManager
    try:
        ConfigManager().delete_scenario(name)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Szenario '{name}' gelöscht.")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("-v", "--verbose", count=True, help="Mehr Log-Ausgabe (-v INFO, -vv DEBUG).")
def cli(verbose: int):
    """Stundenplan-Generator (Backtracking) für Lehrkräfte und Klassen.

    Starten Sie mit: python main.py seed && python main.py solve
    """
    _setup_logging(verbose)


def main():
    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_seed)
cli.add_command(cmd_generate)
cli.add_command(cmd_import)
cli.add_command(cmd_export_legacy)
cli.add_command(cmd_validate)
cli.add_command(cmd_solve)
cli.add_command(cmd_show)
cli.add_command(cmd_export)
cli.add_command(cmd_diagnose)
cli.add_command(cmd_scenario)


if __name__ == "__main__":
    main()
