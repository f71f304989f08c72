"""Vertretungsplaner — Haupt-CLI.

Verwendung:
  python main.py config init               Standard-Konfiguration anlegen
  python main.py config show               Konfiguration anzeigen
  python main.py generate                  Demo-Datensatz erzeugen
  python main.py validate                  Konsistenz-Check
  python main.py affected                  Betroffene Stunden (Standard: aktuelle Woche)
  python main.py needed                    Offene Vertretungen nach Datum
  python main.py recommend                 Vertretungsvorschläge
  python main.py status                    Wer ist gerade wo?
  python main.py board                     Freie Lehrkräfte der Woche
  python main.py absent <id> --date D      Abwesenheit eintragen
  python main.py assign ...                Vertretung bestätigen
  python main.py history                   Vertretungsprotokoll
  python main.py export                    Excel-Export
"""

import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

_DATE = click.DateTime(formats=["%Y-%m-%d"])

_STATUS_STYLE = {
    "available": "green",
    "teaching": "cyan",
    "absent": "red",
    "not_in_school": "dim",
    "unknown": "yellow",
}


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _abort(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


def _load_config(ctx: click.Context):
    """Lädt die Konfiguration (Defaults wenn keine Datei existiert) oder bricht ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager(ctx.obj.get("config_path"))
    try:
        return mgr.load_or_default()
    except ValueError as e:
        _abort(escape(str(e)))


def _data_path(ctx: click.Context) -> Path:
    if ctx.obj.get("data_path"):
        return Path(ctx.obj["data_path"])
    return Path(_load_config(ctx).paths.data_json)


def _load_data(ctx: click.Context):
    """Lädt den Datensatz oder bricht mit Fehlermeldung ab."""
    from models.school_data import SchoolData
    path = _data_path(ctx)
    try:
        return SchoolData.load_json(path)
    except FileNotFoundError:
        _abort(
            f"Keine Datendatei gefunden: {path}\n"
            "Verwenden Sie [bold]python main.py generate[/bold] für einen Demo-Datensatz."
        )
    except ValidationError as e:
        _abort(f"Datensatz ungültig: {path}\n{escape(str(e))}")


def _save_data(ctx: click.Context, data) -> None:
    path = _data_path(ctx)
    data.save_json(path)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {path}")


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


def _resolve_range(start: Optional[datetime], end: Optional[datetime]):
    """Zeitraum aus --from/--to; ohne Angabe die aktuelle Schulwoche."""
    from analysis.absence_expansion import DateRange
    first, last = _as_date(start), _as_date(end)
    if first is None and last is None:
        return DateRange.week_of(date.today())
    try:
        return DateRange(start=first or last, end=last or first)
    except ValidationError as e:
        _abort(f"Ungültiger Zeitraum: {e.errors()[0]['msg']}")


def _affected(data, date_range):
    from analysis.absence_expansion import expand_affected_lessons
    return expand_affected_lessons(
        data.teachers, data.classes, data.substitutions, data.time_slots, date_range
    )


def _find_affected_lesson(data, day: date, time: str, class_id: str):
    """Betroffene Stunde zu (Tag, Slot, Klasse) oder Abbruch."""
    from analysis.absence_expansion import DateRange
    lesson = next(
        (a for a in _affected(data, DateRange.single(day))
         if a.time == time and a.class_id == class_id),
        None,
    )
    if lesson is None:
        _abort(
            f"Keine betroffene Stunde am {day.isoformat()} um {time} "
            f"für Klasse '{class_id}'."
        )
    return lesson


def _print_recommendation(lesson, rec) -> None:
    from export.helpers import format_day, lesson_label

    if rec.recommendation is None:
        border, headline = "red", "[red bold]Kein Vorschlag[/red bold]"
    elif rec.supervisory_only:
        border, headline = "yellow", f"[yellow bold]{rec.recommendation}[/yellow bold] (nur Aufsicht)"
    else:
        border, headline = "green", f"[green bold]{rec.recommendation}[/green bold]"

    lines = [headline, f"[dim]{rec.reasoning}[/dim]"]
    if rec.substitute_options:
        lines.append("")
        lines.append("Kandidaten: " + ", ".join(
            f"{o.name} ({o.score})" for o in rec.substitute_options
        ))
    console.print(Panel(
        "\n".join(lines),
        title=f"{format_day(lesson.date)}  {lesson_label(lesson)}",
        border_style=border,
    ))


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen oder anlegen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    config = _load_config(ctx)

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]",
        title="Planer-Konfiguration",
        border_style="cyan",
    ))

    sc = config.scoring
    table = Table(title="Bewertung", box=box.ROUNDED)
    table.add_column("Kriterium")
    table.add_column("Marker / Fach")
    table.add_column("Punkte", justify="right")
    table.add_row("Fachqualifikation", "", str(sc.weight_qualified))
    table.add_row("Ältere Klassen", sc.senior_classes_marker, str(sc.weight_senior_classes))
    table.add_row(
        "Förderunterricht",
        f"{sc.special_education_marker} / {sc.special_education_subject}",
        str(sc.weight_special_education),
    )
    console.print(table)

    console.print(
        f"\n[bold]Datensatz:[/bold] {config.paths.data_json} | "
        f"[bold]Exporte:[/bold] {config.paths.export_dir}"
    )


@cmd_config.command("init")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration überschreiben.")
@click.pass_context
def config_init(ctx: click.Context, force: bool):
    """Legt die Standard-Konfiguration als YAML an."""
    from config.defaults import default_engine_config
    from config.manager import ConfigManager

    mgr = ConfigManager(ctx.obj.get("config_path"))
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]--force[/bold] zum Überschreiben."
        )
        return
    mgr.save(default_engine_config())


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--reference-day", type=_DATE, default=None,
              help="Abwesenheiten in der Woche dieses Tages (Standard: heute).")
@click.pass_context
def cmd_generate(ctx: click.Context, seed: int, reference_day: Optional[datetime]):
    """Erzeugt einen Demo-Datensatz (Lehrkräfte, Klassen, Abwesenheiten)."""
    from data.fake_data import FakeDataGenerator

    config = _load_config(ctx)
    console.print("[bold]Demo-Datensatz wird generiert...[/bold]")
    gen = FakeDataGenerator(config, seed=seed)
    data = gen.generate(_as_date(reference_day))
    gen.print_summary(data)

    console.print(f"\n[dim]{data.summary()}[/dim]")
    data.validate_consistency().print_rich()
    _save_data(ctx, data)


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.pass_context
def cmd_validate(ctx: click.Context):
    """Prüft Zeitraster und Querverweise des Datensatzes."""
    data = _load_data(ctx)
    console.print(f"\n{data.summary()}\n")
    report = data.validate_consistency()
    report.print_rich()
    sys.exit(0 if report.is_consistent else 1)


# ─── AFFECTED / NEEDED ────────────────────────────────────────────────────────

@click.command("affected")
@click.option("--from", "start", type=_DATE, default=None, help="Erster Tag (YYYY-MM-DD).")
@click.option("--to", "end", type=_DATE, default=None, help="Letzter Tag (YYYY-MM-DD).")
@click.pass_context
def cmd_affected(ctx: click.Context, start, end):
    """Listet alle Stunden, die durch Abwesenheiten betroffen sind."""
    from export.helpers import format_day

    data = _load_data(ctx)
    date_range = _resolve_range(start, end)
    affected = _affected(data, date_range)

    if not affected:
        console.print("[dim]Keine betroffenen Stunden im Zeitraum.[/dim]")
        return

    table = Table(
        title=f"Betroffene Stunden {date_range.start.isoformat()} – {date_range.end.isoformat()}",
        box=box.ROUNDED,
    )
    table.add_column("Datum")
    table.add_column("Zeit")
    table.add_column("Klasse")
    table.add_column("Fach")
    table.add_column("Fehlt")
    table.add_column("Status")
    for lesson in affected:
        status = "[green]vertreten[/green]" if lesson.is_covered else "[red]offen[/red]"
        table.add_row(format_day(lesson.date), lesson.time, lesson.class_name,
                      lesson.subject, lesson.absent_teacher_name, status)
    console.print(table)


@click.command("needed")
@click.option("--from", "start", type=_DATE, default=None, help="Erster Tag (YYYY-MM-DD).")
@click.option("--to", "end", type=_DATE, default=None, help="Letzter Tag (YYYY-MM-DD).")
@click.pass_context
def cmd_needed(ctx: click.Context, start, end):
    """Offene Vertretungen, gruppiert nach Datum."""
    from analysis.absence_expansion import needed_substitutes
    from export.helpers import format_day

    data = _load_data(ctx)
    grouped = needed_substitutes(_affected(data, _resolve_range(start, end)))

    if not grouped:
        console.print("[green]✓[/green] Alle betroffenen Stunden sind vertreten.")
        return

    for day, lessons in grouped.items():
        table = Table(title=format_day(day), box=box.SIMPLE_HEAVY)
        table.add_column("Zeit")
        table.add_column("Klasse")
        table.add_column("Fach")
        table.add_column("Fehlt")
        for lesson in lessons:
            table.add_row(lesson.time, lesson.class_name, lesson.subject,
                          lesson.absent_teacher_name)
        console.print(table)

    total = sum(len(lessons) for lessons in grouped.values())
    console.print(f"[bold]{total}[/bold] offene Stunden an {len(grouped)} Tagen.")


# ─── RECOMMEND ────────────────────────────────────────────────────────────────

@click.command("recommend")
@click.option("--date", "day", type=_DATE, default=None,
              help="Tag der Stunde (ohne: alle offenen Stunden im Zeitraum).")
@click.option("--time", "time", default=None, help="Beginn der Stunde (HH:MM).")
@click.option("--class-id", default=None, help="ID der Klasse.")
@click.option("--from", "start", type=_DATE, default=None, help="Erster Tag (YYYY-MM-DD).")
@click.option("--to", "end", type=_DATE, default=None, help="Letzter Tag (YYYY-MM-DD).")
@click.pass_context
def cmd_recommend(ctx: click.Context, day, time, class_id, start, end):
    """Schlägt Vertretungen vor – für eine Stunde oder alle offenen Stunden."""
    from analysis.substitution_helper import SubstitutionFinder

    config = _load_config(ctx)
    data = _load_data(ctx)
    finder = SubstitutionFinder(config.scoring)

    if day is not None:
        if not time or not class_id:
            _abort("Für eine einzelne Stunde werden --date, --time und --class-id benötigt.")
        lesson = _find_affected_lesson(data, day.date(), time, class_id)
        if lesson.is_covered:
            console.print("[yellow]Diese Stunde ist bereits vertreten.[/yellow]")
            return
        lessons = [lesson]
    else:
        lessons = _affected(data, _resolve_range(start, end))

    results = finder.recommend_for_lessons(lessons, data.teachers, data.classes, data.time_slots)
    if not results:
        console.print("[green]✓[/green] Keine offenen Stunden im Zeitraum.")
        return
    for lesson, rec in results:
        _print_recommendation(lesson, rec)


# ─── STATUS / BOARD ───────────────────────────────────────────────────────────

@click.command("status")
@click.option("--at", "moment", type=click.DateTime(formats=["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M"]),
              default=None, help="Zeitpunkt 'YYYY-MM-DD HH:MM' (Standard: jetzt).")
@click.pass_context
def cmd_status(ctx: click.Context, moment: Optional[datetime]):
    """Zeigt, welche Lehrkraft zu einem Zeitpunkt wo ist."""
    from analysis.availability import availability_status

    data = _load_data(ctx)
    moment = moment or datetime.now()

    table = Table(title=f"Status {moment.strftime('%d.%m.%Y %H:%M')}", box=box.ROUNDED)
    table.add_column("Lehrkraft", style="bold")
    table.add_column("Status")
    for teacher in data.teachers:
        status = availability_status(teacher, moment, data.time_slots)
        style = _STATUS_STYLE[status.value]
        table.add_row(teacher.name, f"[{style}]{status.value}[/{style}]")
    console.print(table)


@click.command("board")
@click.option("--week", "week_of", type=_DATE, default=None,
              help="Ein Tag der gewünschten Woche (Standard: heute).")
@click.pass_context
def cmd_board(ctx: click.Context, week_of: Optional[datetime]):
    """Freie Lehrkräfte je Wochentag und Unterrichtsstunde."""
    from analysis.availability import free_teachers_board
    from models.timeslot import WEEKDAYS, week_start

    data = _load_data(ctx)
    first_day = week_start(_as_date(week_of) or date.today())
    board = free_teachers_board(data.teachers, first_day, data.time_slots)

    table = Table(title=f"Freie Lehrkräfte ab {first_day.isoformat()}", box=box.ROUNDED,
                  show_lines=True)
    table.add_column("Zeit", style="bold")
    for day in WEEKDAYS:
        table.add_column(day)
    for slot in data.lesson_slots:
        table.add_row(str(slot), *("\n".join(board[day][slot.start]) for day in WEEKDAYS))
    console.print(table)


# ─── ABSENT / ASSIGN ──────────────────────────────────────────────────────────

@click.command("absent")
@click.argument("teacher_id")
@click.option("--date", "day", type=_DATE, required=True, help="Tag der Abwesenheit.")
@click.option("--start-time", default=None, help="Beginn (HH:MM) bei teilweiser Abwesenheit.")
@click.option("--end-time", default=None, help="Ende (HH:MM) bei teilweiser Abwesenheit.")
@click.option("--clear", is_flag=True, default=False,
              help="Abwesenheiten dieses Tages entfernen.")
@click.pass_context
def cmd_absent(ctx: click.Context, teacher_id: str, day: datetime,
               start_time: Optional[str], end_time: Optional[str], clear: bool):
    """Trägt eine Abwesenheit ein (ersetzt bestehende am selben Tag)."""
    from models.teacher import AbsenceDay

    data = _load_data(ctx)
    calendar_day = day.date()
    try:
        if clear:
            data = data.clear_absences(teacher_id, calendar_day)
            console.print(f"[green]✓[/green] Abwesenheiten am {calendar_day.isoformat()} entfernt.")
        else:
            partial = start_time is not None or end_time is not None
            absence = AbsenceDay(
                date=calendar_day,
                is_all_day=not partial,
                start_time=start_time,
                end_time=end_time,
            )
            data = data.mark_absent(teacher_id, [absence])
            console.print(
                f"[green]✓[/green] {data.teacher(teacher_id).name}: abwesend {absence.describe()}"
            )
    except KeyError as e:
        _abort(e.args[0])
    except ValidationError as e:
        _abort(f"Ungültige Abwesenheit: {e.errors()[0]['msg']}")

    _save_data(ctx, data)


@click.command("assign")
@click.option("--date", "day", type=_DATE, required=True, help="Tag der Stunde.")
@click.option("--time", "time", required=True, help="Beginn der Stunde (HH:MM).")
@click.option("--class-id", required=True, help="ID der Klasse.")
@click.option("--substitute", "substitute_id", required=True,
              help="ID der Vertretungslehrkraft.")
@click.pass_context
def cmd_assign(ctx: click.Context, day: datetime, time: str, class_id: str, substitute_id: str):
    """Bestätigt eine Vertretung für eine betroffene Stunde."""
    from analysis.substitution_helper import LessonDetails, SubstitutionFinder, build_substitution_record

    config = _load_config(ctx)
    data = _load_data(ctx)
    lesson = _find_affected_lesson(data, day.date(), time, class_id)
    if lesson.is_covered:
        _abort("Diese Stunde ist bereits vertreten.")

    substitute = data.teacher(substitute_id)
    if substitute is None:
        _abort(f"Lehrkraft '{substitute_id}' nicht gefunden.")
    if substitute.id == lesson.absent_teacher_id:
        _abort("Die abwesende Lehrkraft kann sich nicht selbst vertreten.")

    pool = [t for t in data.teachers if t.id != lesson.absent_teacher_id]
    rec = SubstitutionFinder(config.scoring).find_substitute(
        LessonDetails.from_affected(lesson), pool, data.classes, data.time_slots
    )
    if substitute.id not in {o.teacher_id for o in rec.substitute_options}:
        console.print(
            f"[yellow]Hinweis:[/yellow] {substitute.name} ist zu dieser Zeit nicht frei "
            f"(verfügbar, unverplant und anwesend)."
        )

    data = data.add_substitution(build_substitution_record(lesson, substitute))
    console.print(
        f"[green]✓[/green] {substitute.name} vertritt {lesson.subject} in "
        f"{lesson.class_name} am {lesson.date.isoformat()} um {lesson.time}."
    )
    _save_data(ctx, data)


# ─── HISTORY / EXPORT ─────────────────────────────────────────────────────────

@click.command("history")
@click.option("--teacher", "teacher_id", default=None,
              help="Nur Vertretungen dieser Lehrkraft (abwesend oder vertretend).")
@click.pass_context
def cmd_history(ctx: click.Context, teacher_id: Optional[str]):
    """Zeigt das Vertretungsprotokoll (neueste zuerst)."""
    from export.helpers import format_day

    data = _load_data(ctx)
    records = [
        s for s in data.substitutions
        if teacher_id is None or teacher_id in (s.absent_teacher_id, s.substitute_teacher_id)
    ]
    if not records:
        console.print("[dim]Noch keine Vertretungen erfasst.[/dim]")
        return

    table = Table(title="Vertretungsprotokoll", box=box.ROUNDED)
    table.add_column("Datum")
    table.add_column("Zeit")
    table.add_column("Klasse")
    table.add_column("Fach")
    table.add_column("Abwesend")
    table.add_column("Vertretung", style="bold")
    for s in sorted(records, key=lambda r: (r.date, r.time), reverse=True):
        table.add_row(format_day(s.date), s.time, s.class_name or s.class_id, s.subject,
                      s.absent_teacher_name, s.substitute_teacher_name)
    console.print(table)
    console.print(f"[bold]{len(records)}[/bold] Vertretungen.")


@click.command("export")
@click.option("--from", "start", type=_DATE, default=None, help="Erster Tag (YYYY-MM-DD).")
@click.option("--to", "end", type=_DATE, default=None, help="Letzter Tag (YYYY-MM-DD).")
@click.option("--output", "-o", default=None,
              help="Ausgabedatei (Standard: <export_dir>/vertretungen_<start>.xlsx).")
@click.pass_context
def cmd_export(ctx: click.Context, start, end, output: Optional[str]):
    """Exportiert offene Vertretungen und Protokoll als Excel-Datei."""
    from export.excel_export import ExcelExporter

    config = _load_config(ctx)
    data = _load_data(ctx)
    date_range = _resolve_range(start, end)
    out_path = (
        Path(output) if output
        else Path(config.paths.export_dir) / f"vertretungen_{date_range.start.isoformat()}.xlsx"
    )
    ExcelExporter(data, config.scoring, config.school_name).export(out_path, date_range)
    console.print(f"[green]✓[/green] Excel gespeichert: {out_path}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zur Konfigurationsdatei (YAML).")
@click.option("--data", "data_path", type=click.Path(path_type=Path), default=None,
              help="Pfad zum JSON-Datensatz (überschreibt die Konfiguration).")
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliche Log-Ausgabe.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], data_path: Optional[Path], verbose: bool):
    """Vertretungsplaner: betroffene Stunden erkennen und Vertretungen vorschlagen.

    Starten Sie mit: python main.py generate
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["data_path"] = data_path
    if verbose:
        from rich.logging import RichHandler
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_validate)
cli.add_command(cmd_affected)
cli.add_command(cmd_needed)
cli.add_command(cmd_recommend)
cli.add_command(cmd_status)
cli.add_command(cmd_board)
cli.add_command(cmd_absent)
cli.add_command(cmd_assign)
cli.add_command(cmd_history)
cli.add_command(cmd_export)


if __name__ == "__main__":
    main()
