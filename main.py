"""Unterrichtsplaner — Haupt-CLI.

Verwendung:
  python main.py init                          Konfiguration anlegen
  python main.py config show                   Konfiguration anzeigen
  python main.py config set <pfad> <wert>      Einzelwert ändern
  python main.py profile save <name>           Konfiguration als Profil speichern
  python main.py profile load <name>           Profil als aktive Konfiguration
  python main.py profile list                  Profile auflisten
  python main.py sample                        Beispieldaten erzeugen (JSON)
  python main.py check                         Machbarkeits-Check
  python main.py dates <owner> <jahr> <monat>  Unterrichtstermine eines Monats
  python main.py plan <owner>                  Lehrplan erzeugen (--save, --export)
  python main.py private <owner> <buch>        Nächste Einheiten für Privatschüler
  python main.py review <owner> <nr>           Review hinter Einheit <nr> einfügen
  python main.py move <owner> <id> <datum>     Einheit auf anderen Termin ziehen
  python main.py delete <owner> <id>           Einheit löschen
  python main.py show <owner>                  Gespeicherten Plan anzeigen
  python main.py book items <buch>             Abfolge eines Buches (review, delete, reorder)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from data.lesson_store import DEFAULT_STORE

console = Console()

# Standard-Pfad für den gespeicherten Datensatz
DEFAULT_DATA_JSON = Path("output/plan_data.json")


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py init[/bold] aus."
        )
        sys.exit(1)
    return mgr, mgr.load()


def _load_data_or_abort(json_path: str):
    """Lädt den Datensatz oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    from models.plan_data import PlanData

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py sample[/bold] für Beispieldaten."
        )
        sys.exit(1)
    data = PlanData.load_json(p)
    mgr = ConfigManager()
    if not mgr.first_run_check():
        # Aktive Konfiguration hat Vorrang vor der Kopie im Datensatz
        data.config = mgr.load()
    return data


def _owner_or_abort(data, owner_id: str):
    owner = data.get_owner(owner_id)
    if owner is None:
        console.print(
            f"[red]Owner '{owner_id}' nicht gefunden.[/red] "
            f"Verfügbar: {', '.join(o.id for o in data.owners)}"
        )
        sys.exit(1)
    return owner


def _fail(error: Exception) -> None:
    console.print(f"[red bold]Fehler:[/red bold] {error}")
    sys.exit(1)


def _print_lessons(lessons, title: str) -> None:
    """Gibt Einheiten als Rich-Tabelle aus."""
    from export.tui_renderer import render_plan_rows

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Nr.", justify="right")
    table.add_column("Datum")
    table.add_column("Tag")
    table.add_column("Per.", justify="right")
    table.add_column("Buch", style="cyan")
    table.add_column("Inhalt")
    table.add_column("Status", style="dim")
    for row in render_plan_rows(lessons):
        table.add_row(*row)
    console.print(table)


def _print_warnings(warnings) -> None:
    for w in warnings:
        console.print(f"[yellow]⚠ {w}[/yellow]")


# ─── INIT ─────────────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--academy", default=None, help="Name der Akademie.")
@click.option("--force", is_flag=True, default=False,
              help="Bestehende Konfiguration ohne Rückfrage überschreiben.")
def cmd_init(academy: Optional[str], force: bool):
    """Legt die Standard-Konfiguration an (config/planner_config.yaml)."""
    from config.defaults import default_planner_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem überschreiben?", default=False):
            return

    config = default_planner_config()
    if academy:
        config = config.model_copy(update={"academy_name": academy})
    mgr.save(config)
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Führen Sie jetzt [bold]python main.py sample[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen und ändern."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()

    cal = config.calendar
    console.print(Panel(
        f"[bold]{config.academy_name}[/bold]  |  "
        f"Schuljahr ab Monat {cal.academic_year_start_month}  |  "
        f"Standard-Tage: {', '.join(cal.default_weekdays)}",
        title="Akademie-Konfiguration",
        border_style="cyan",
    ))

    sc = config.sessions
    table = Table(title="Einheiten", box=box.ROUNDED)
    table.add_column("Tage/Woche")
    table.add_column("Einheiten/Termin")
    table.add_column("Soll/Monat")
    days = sorted(set(sc.slots_per_day_by_weekdays) | set(sc.monthly_target_by_weekdays))
    for d in days:
        table.add_row(
            str(d),
            str(sc.slots_per_day_by_weekdays.get(d, sc.default_slots_per_day)),
            str(sc.monthly_target_by_weekdays.get(d, d * sc.weeks_per_month)),
        )
    table.add_row("sonst", str(sc.default_slots_per_day), f"Tage × {sc.weeks_per_month}")
    console.print(table)

    pc = config.progression
    console.print(
        f"\n[bold]Fortschritt:[/bold] {pc.default_days_per_unit} Tage/Unit | "
        f"{pc.default_days_per_volume} Tage/Volume | "
        f"Buchende: {pc.exhaustion_policy.value}"
    )
    gc = config.generator
    console.print(
        f"[bold]Generator:[/bold] Reihenfolge bei Gleichstand: {gc.tie_break.value} | "
        f"Erster Monat erweitert: {'ja' if cal.extend_first_month else 'nein'}"
    )


@cmd_config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Setzt einen Einzelwert, z.B. progression.exhaustion_policy stop."""
    mgr, config = _load_config_or_abort()
    try:
        config = mgr.set_value(config, key, value)
    except (KeyError, ValueError) as e:
        _fail(e)
    mgr.save(config)


# ─── SAMPLE ───────────────────────────────────────────────────────────────────

@click.command("sample")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--classes", "num_classes", default=3, type=click.IntRange(1, 4),
              help="Anzahl Klassen (1-4).")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad für den JSON-Datensatz.")
def cmd_sample(seed: int, num_classes: int, json_path: str):
    """Erzeugt Beispieldaten (Bücher, Klassen, Zuweisungen, Kalender)."""
    mgr, config = _load_config_or_abort()
    from data.sample_data import SampleDataGenerator

    console.print("[bold]Beispieldaten werden generiert...[/bold]")
    gen = SampleDataGenerator(config, seed=seed)
    data = gen.generate(num_classes=num_classes)
    gen.print_summary(data)
    console.print(f"\n[dim]{data.summary()}[/dim]")

    data.validate_feasibility().print_rich()

    out_path = Path(json_path)
    data.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def cmd_check(json_path: str):
    """Führt einen Machbarkeits-Check auf dem Datensatz durch."""
    data = _load_data_or_abort(json_path)
    console.print(f"\n{data.summary()}\n")
    report = data.validate_feasibility()
    report.print_rich()

    sys.exit(0 if report.is_feasible else 1)


# ─── DATES ────────────────────────────────────────────────────────────────────

@click.command("dates")
@click.argument("owner_id")
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@click.option("--extend", is_flag=True, default=False,
              help="Bis zum Sonntag der ersten Woche erweitern.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def cmd_dates(owner_id: str, year: int, month: int, extend: bool, json_path: str):
    """Zeigt die Unterrichtstermine eines Owners in einem Monat (1-12)."""
    from engine.calendar_resolver import (
        event_slots, overrides_by_date, parse_local_date, resolve_dates, slots_per_day,
    )
    from engine.errors import PlannerError
    from export.helpers import DAY_HEADERS

    data = _load_data_or_abort(json_path)
    owner = _owner_or_abort(data, owner_id)
    overrides = data.all_overrides()
    try:
        dates = resolve_dates(
            year, month - 1, owner.weekdays, data.all_holidays(), overrides,
            scope_id=owner.id, extend_to_week_start=extend,
        )
    except PlannerError as e:
        _fail(e)

    special = overrides_by_date(overrides, owner.id)
    events = event_slots(dates, overrides, owner.id)
    spd = owner.slots_per_day or slots_per_day(owner.weekdays, data.config.sessions)

    table = Table(title=f"Termine {owner.name} — {month:02d}/{year}", box=box.ROUNDED)
    table.add_column("Datum")
    table.add_column("Tag")
    table.add_column("Plätze", justify="right")
    table.add_column("Hinweis")
    for d in dates:
        o = special.get(d)
        note = ""
        if o is not None:
            note = f"{o.kind.value}: {o.name}".rstrip(": ")
        free = spd - min(spd, events[d].sessions) if d in events else spd
        weekday = DAY_HEADERS[(parse_local_date(d).weekday() + 1) % 7]
        table.add_row(d, weekday, str(free), note)
    console.print(table)
    console.print(f"[bold]{len(dates)}[/bold] Termine × {spd} Einheiten")


# ─── PLAN ─────────────────────────────────────────────────────────────────────

@click.command("plan")
@click.argument("owner_id")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
@click.option("--save", is_flag=True, default=False,
              help="Plan Monat für Monat in der Ablage speichern.")
@click.option("--export", "export_path", default=None,
              help="Plan zusätzlich als Excel-Datei exportieren.")
@click.option("--rollover", "dates_per_month", default=None, type=click.IntRange(1, 31),
              help="Feste Anzahl Termine pro Monat (Übertrag in den Folgemonat).")
def cmd_plan(owner_id: str, json_path: str, store_path: str, save: bool,
             export_path: Optional[str], dates_per_month: Optional[int]):
    """Erzeugt den Lehrplan eines Owners für seine Plan-Monate."""
    from analysis.capacity import print_capacity_reports
    from analysis.diff import diff_lessons
    from analysis.plan_validator import PlanValidator
    from data.lesson_store import LessonStore
    from engine import LessonPlanGenerator, PlannerError
    from engine.calendar_resolver import (
        event_slots, resolve_run_dates, rollover_dates, slots_per_day,
    )
    from engine.distribution import build_month_plans

    data = _load_data_or_abort(json_path)
    owner = _owner_or_abort(data, owner_id)
    if owner.is_private:
        console.print(
            f"[yellow]{owner.name} ist Privatschüler.[/yellow] "
            f"Verwenden Sie [bold]python main.py private {owner.id} <buch>[/bold]."
        )
        sys.exit(1)

    cfg = data.config
    holidays = data.all_holidays()
    overrides = data.all_overrides()
    store = LessonStore(Path(store_path))

    try:
        plans = build_month_plans(
            data.allocations_for(owner.id), owner.year, owner.start_month, owner.duration,
            academic_start=cfg.calendar.academic_year_start_month,
            tie_break=cfg.generator.tie_break,
        )
        if dates_per_month:
            plan_dates = rollover_dates(
                plans, owner.weekdays, dates_per_month, holidays, overrides,
                scope_id=owner.id, buffer_months=cfg.calendar.rollover_buffer_months,
            )
        else:
            plan_dates = resolve_run_dates(
                plans, owner.weekdays, holidays, overrides,
                scope_id=owner.id, extend_first_month=cfg.calendar.extend_first_month,
            )
        all_dates = [d for dates in plan_dates.values() for d in dates]
        spd = owner.slots_per_day or slots_per_day(owner.weekdays, cfg.sessions)
        books = data.books_by_id()
        progress = (
            store.progress_before(owner.id, min(all_dates), books, cfg.progression)
            if all_dates else {}
        )

        result = LessonPlanGenerator(books, cfg).generate(
            owner.id, plans, plan_dates, spd,
            initial_progress=progress,
            events=event_slots(all_dates, overrides, owner.id),
        )
    except PlannerError as e:
        _fail(e)

    _print_lessons(result.lessons, f"Lehrplan {owner.name} ({owner.id})")
    print_capacity_reports(result.capacity, console)
    _print_warnings(result.warnings)

    report = PlanValidator(cfg.progression).validate(
        result.lessons, data.books, overrides, holidays, owner.id
    )
    if report.violations:
        report.print_rich()

    if save:
        previous = [
            l for l in store.lessons(owner.id)
            if all_dates and all_dates[0] <= l.date <= all_dates[-1]
        ]
        if previous:
            diff_lessons(previous, result.lessons).print_rich()
        try:
            for plan in sorted(plans, key=lambda p: (p.year, p.month)):
                month_dates = plan_dates.get(plan.key, [])
                date_set = set(month_dates)
                month_lessons = [l for l in result.lessons if l.date in date_set]
                if not month_lessons:
                    continue
                if dates_per_month:
                    # Übertrag: jeder Block ersetzt nur seine eigenen Termine
                    removed = store.save_range(
                        owner.id, month_dates[0], month_dates[-1], month_lessons
                    )
                else:
                    removed = store.save_month(owner.id, plan.year, plan.month, month_lessons)
                console.print(
                    f"[green]✓[/green] {plan.label}: {len(month_lessons)} Einheiten "
                    f"gespeichert ({removed} ersetzt)"
                )
        except PlannerError as e:
            _fail(e)

    if export_path:
        from export.excel_export import ExcelExporter
        out = Path(export_path)
        ExcelExporter(
            result.lessons, owner, data.books, cfg, overrides, result.capacity
        ).export(out)
        console.print(f"[green]✓[/green] Excel gespeichert: {out}")


# ─── PRIVATE ──────────────────────────────────────────────────────────────────

@click.command("private")
@click.argument("owner_id")
@click.argument("book_id")
@click.option("--limit", "-n", default=4, type=click.IntRange(1, 100),
              help="Anzahl Einheiten.")
@click.option("--dry-run", is_flag=True, default=False,
              help="Nur anzeigen, nicht speichern.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
def cmd_private(owner_id: str, book_id: str, limit: int, dry_run: bool,
                json_path: str, store_path: str):
    """Erzeugt die nächsten Einheiten eines Buches für einen Privatschüler."""
    from data.lesson_store import LessonStore
    from engine import PlannerError, generate_private_chunk

    data = _load_data_or_abort(json_path)
    owner = _owner_or_abort(data, owner_id)
    book = data.get_book(book_id)
    if book is None:
        console.print(f"[red]Buch '{book_id}' nicht gefunden.[/red]")
        sys.exit(1)

    store = LessonStore(Path(store_path))
    try:
        result = generate_private_chunk(
            owner, book, limit,
            holidays=data.all_holidays(),
            overrides=data.all_overrides(),
            last_lesson=store.last_lesson(owner.id),
            last_book_lesson=store.last_lesson(owner.id, book.id),
            config=data.config,
        )
        _print_lessons(result.lessons, f"{owner.name}: {book.name}")
        _print_warnings(result.warnings)
        if result.lessons and not dry_run:
            store.append(owner.id, result.lessons)
            console.print(f"[green]✓[/green] {len(result.lessons)} Einheiten gespeichert")
    except PlannerError as e:
        _fail(e)


# ─── ANPASSUNGEN ──────────────────────────────────────────────────────────────

def _stored_or_abort(store, owner_id: str):
    lessons = store.lessons(owner_id)
    if not lessons:
        console.print(f"[red]Kein gespeicherter Plan für '{owner_id}'.[/red]")
        sys.exit(1)
    return lessons


@click.command("review")
@click.argument("owner_id")
@click.argument("after", type=int)
@click.option("--book", "book_id", default=None, help="Buch, zu dem das Review gehört.")
@click.option("--label", default="Review", help="Anzeigetext.")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
def cmd_review(owner_id: str, after: int, book_id: Optional[str], label: str, store_path: str):
    """Fügt ein Review hinter der Einheit mit Nummer AFTER ein (0 = am Anfang)."""
    from data.lesson_store import LessonStore
    from engine import PlannerError
    from engine.adjustments import insert_review

    store = LessonStore(Path(store_path))
    lessons = _stored_or_abort(store, owner_id)
    try:
        updated = insert_review(lessons, after, book_id=book_id, label=label)
        store.replace(owner_id, updated)
    except PlannerError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Review an Position {after + 1} eingefügt")


@click.command("move")
@click.argument("owner_id")
@click.argument("lesson_id")
@click.argument("target_date")
@click.option("--position", "-p", default=None, type=click.IntRange(1, None),
              help="Ziel-Periode (Standard: ans Ende).")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
def cmd_move(owner_id: str, lesson_id: str, target_date: str, position: Optional[int],
             store_path: str):
    """Verschiebt eine gespeicherte Einheit auf TARGET_DATE (YYYY-MM-DD)."""
    from data.lesson_store import LessonStore
    from engine import PlannerError
    from engine.adjustments import move_lesson
    from engine.calendar_resolver import format_date_key, parse_local_date

    store = LessonStore(Path(store_path))
    lessons = _stored_or_abort(store, owner_id)
    try:
        day = format_date_key(parse_local_date(target_date))
        store.replace(owner_id, move_lesson(lessons, lesson_id, day, position))
    except PlannerError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Einheit {lesson_id} → {day}")


@click.command("delete")
@click.argument("owner_id")
@click.argument("lesson_id")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
def cmd_delete(owner_id: str, lesson_id: str, store_path: str):
    """Löscht eine gespeicherte Einheit und nummeriert neu."""
    from data.lesson_store import LessonStore
    from engine import PlannerError
    from engine.adjustments import delete_lesson

    store = LessonStore(Path(store_path))
    lessons = _stored_or_abort(store, owner_id)
    try:
        store.replace(owner_id, delete_lesson(lessons, lesson_id))
    except PlannerError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Einheit {lesson_id} gelöscht")


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.argument("owner_id")
@click.option("--month", default=None, help="Kalenderansicht eines Monats (YYYY-MM).")
@click.option("--store", "store_path", default=str(DEFAULT_STORE),
              help="Pfad der Lehrplan-Ablage.")
def cmd_show(owner_id: str, month: Optional[str], store_path: str):
    """Zeigt den gespeicherten Plan eines Owners."""
    from data.lesson_store import LessonStore

    store = LessonStore(Path(store_path))
    lessons = _stored_or_abort(store, owner_id)

    if month is None:
        _print_lessons(lessons, f"Gespeicherter Plan {owner_id}")
        return

    from export.helpers import DAY_HEADERS
    from export.tui_renderer import render_month_calendar

    try:
        year, mon = (int(part) for part in month.split("-"))
    except ValueError:
        console.print(f"[red]Ungültiger Monat: {month} (erwartet YYYY-MM)[/red]")
        sys.exit(1)
    if not 1 <= mon <= 12:
        console.print(f"[red]Ungültiger Monat: {month} (erwartet YYYY-MM)[/red]")
        sys.exit(1)

    table = Table(title=f"{owner_id} — {month}", box=box.ROUNDED, show_lines=True)
    for header in DAY_HEADERS:
        table.add_column(header, width=18)
    month_lessons = [l for l in lessons if l.month_key == month]
    for row in render_month_calendar(year, mon - 1, month_lessons):
        table.add_row(*row)
    console.print(table)


# ─── BUCH-ABFOLGE ─────────────────────────────────────────────────────────────

def _book_items_or_abort(data, book_id: str):
    """Gespeicherte Abfolge eines Buches, sonst aus den Units erzeugt."""
    from engine.progression import expand_book_units

    book = data.get_book(book_id)
    if book is None:
        console.print(f"[red]Buch '{book_id}' nicht gefunden.[/red]")
        sys.exit(1)
    items = data.book_items.get(book.id)
    if items is None:
        items = expand_book_units(book, data.config.progression, data.config.generator)
    return book, items


def _save_book_items(data, book_id: str, items, json_path: str) -> None:
    data.book_items[book_id] = items
    data.save_json(Path(json_path))


@click.group("book")
def cmd_book():
    """Abfolge eines Buches (Lektionstage und Wiederholungen) bearbeiten."""


@cmd_book.command("items")
@click.argument("book_id")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def book_items(book_id: str, json_path: str):
    """Zeigt die Abfolge eines Buches."""
    data = _load_data_or_abort(json_path)
    book, items = _book_items_or_abort(data, book_id)

    table = Table(title=f"{book.name} ({book.id})", box=box.ROUNDED)
    table.add_column("Nr.", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Typ")
    table.add_column("Titel", style="cyan")
    table.add_column("Video", justify="center")
    for item in items:
        table.add_row(
            str(item.sequence), item.id, item.item_type, item.title,
            "✓" if item.has_video else "",
        )
    console.print(table)


@cmd_book.command("review")
@click.argument("book_id")
@click.argument("after", type=int)
@click.option("--title", default="Review", help="Titel des Eintrags.")
@click.option("--video", is_flag=True, default=False, help="Review mit Video.")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def book_review(book_id: str, after: int, title: str, video: bool, json_path: str):
    """Fügt einen Review-Eintrag hinter Nummer AFTER ein (0 = am Anfang)."""
    from engine import PlannerError
    from engine.adjustments import insert_book_review

    data = _load_data_or_abort(json_path)
    book, items = _book_items_or_abort(data, book_id)
    try:
        updated = insert_book_review(items, after, book.id, title=title, has_video=video)
    except PlannerError as e:
        _fail(e)
    _save_book_items(data, book.id, updated, json_path)
    console.print(f"[green]✓[/green] Review an Position {after + 1} eingefügt")


@cmd_book.command("delete")
@click.argument("book_id")
@click.argument("item_id")
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def book_delete(book_id: str, item_id: str, json_path: str):
    """Entfernt einen Eintrag; spätere Einträge rücken nach."""
    from engine import PlannerError
    from engine.adjustments import delete_book_item

    data = _load_data_or_abort(json_path)
    book, items = _book_items_or_abort(data, book_id)
    try:
        updated = delete_book_item(items, item_id)
    except PlannerError as e:
        _fail(e)
    _save_book_items(data, book.id, updated, json_path)
    console.print(f"[green]✓[/green] Eintrag {item_id} gelöscht")


@cmd_book.command("reorder")
@click.argument("book_id")
@click.argument("assignments", nargs=-1, required=True)
@click.option("--json-path", default=str(DEFAULT_DATA_JSON),
              help="Pfad zum JSON-Datensatz.")
def book_reorder(book_id: str, assignments: tuple[str, ...], json_path: str):
    """Setzt neue Nummern, z.B. B01_0001=2 B01_0002=1."""
    from engine import PlannerError
    from engine.adjustments import reorder_sequence

    new_order = []
    for pair in assignments:
        item_id, _, seq = pair.rpartition("=")
        if not item_id or not seq.isdigit():
            console.print(f"[red]Ungültige Angabe: {pair} (erwartet ID=NR)[/red]")
            sys.exit(1)
        new_order.append((item_id, int(seq)))

    data = _load_data_or_abort(json_path)
    book, items = _book_items_or_abort(data, book_id)
    try:
        updated = reorder_sequence(items, new_order, book_id=book.id)
    except PlannerError as e:
        _fail(e)
    _save_book_items(data, book.id, updated, json_path)
    console.print(f"[green]✓[/green] {len(new_order)} Einträge umsortiert")


# ─── PROFILE ──────────────────────────────────────────────────────────────────

@click.group("profile")
def cmd_profile():
    """Konfigurations-Profile verwalten (speichern, laden, auflisten)."""


@cmd_profile.command("save")
@click.argument("name")
@click.option("--description", "-d", default="", help="Beschreibung des Profils.")
def profile_save(name: str, description: str):
    """Speichert die aktuelle Konfiguration als Profil."""
    mgr, config = _load_config_or_abort()
    mgr.save_profile(config, name, description)


@cmd_profile.command("load")
@click.argument("name")
def profile_load(name: str):
    """Lädt ein gespeichertes Profil als aktive Konfiguration."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_profile(name)
    except FileNotFoundError as e:
        _fail(e)
    mgr.save(config)
    console.print(f"[green]✓[/green] Profil '{name}' als aktive Config gesetzt.")


@cmd_profile.command("list")
def profile_list():
    """Listet alle gespeicherten Profile auf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    profiles = mgr.list_profiles()

    if not profiles:
        console.print("[dim]Keine Profile vorhanden.[/dim]")
        return

    table = Table(title="Gespeicherte Profile", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Akademie")
    table.add_column("Erstellt")
    table.add_column("Beschreibung")
    for p in profiles:
        table.add_row(p["name"], p["academy"], str(p["created"]), p["description"])
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Log-Ausgaben des Generators anzeigen.")
def cli(verbose: bool):
    """Unterrichtsplaner für Sprachakademien.

    Starten Sie mit: python main.py init
    """
    if verbose:
        from rich.logging import RichHandler
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def main():
    """Einstiegspunkt. Legt beim ersten Aufruf die Konfiguration an."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Unterrichtsplaner![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Die Standard-Konfiguration wird jetzt angelegt...",
            border_style="cyan",
        ))
        sys.argv.append("init")

    cli()


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_sample)
cli.add_command(cmd_check)
cli.add_command(cmd_dates)
cli.add_command(cmd_plan)
cli.add_command(cmd_private)
cli.add_command(cmd_review)
cli.add_command(cmd_move)
cli.add_command(cmd_delete)
cli.add_command(cmd_show)
cli.add_command(cmd_book)
cli.add_command(cmd_profile)


if __name__ == "__main__":
    main()
