"""SchoolData: Vollständiger Datensatz (Zeitraster, Lehrkräfte, Klassen, Vertretungen) + Konsistenz-Check."""

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from models.school_class import SchoolClass
from models.substitution import SubstitutionRecord
from models.teacher import AbsenceDay, Teacher
from models.timeslot import TimeSlot, check_time_grid, find_slot


class ConsistencyReport(BaseModel):
    """Ergebnis des Konsistenz-Checks."""

    is_consistent: bool
    errors: list[str]      # Kritische Probleme (Raster unbrauchbar)
    warnings: list[str]    # Veraltete oder widersprüchliche Verweise

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_consistent:
            status = "[bold green]✓ KONSISTENT[/bold green]"
        else:
            status = "[bold red]✗ INKONSISTENT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler (kritisch):[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Konsistenz-Check", border_style="cyan"))


class SchoolData(BaseModel):
    """Vollständiger Datensatz einer Schule.

    Wird nie in-place verändert: Änderungen (Abwesenheit, Vertretung)
    liefern einen neuen Datensatz.
    """

    time_slots: list[TimeSlot]
    teachers: list[Teacher]
    classes: list[SchoolClass]
    substitutions: list[SubstitutionRecord] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Nachschlagen ───

    def teacher(self, teacher_id: str) -> Optional[Teacher]:
        return next((t for t in self.teachers if t.id == teacher_id), None)

    def school_class(self, class_id: str) -> Optional[SchoolClass]:
        return next((c for c in self.classes if c.id == class_id), None)

    @property
    def lesson_slots(self) -> list[TimeSlot]:
        """Nur Unterrichtsstunden, ohne Pausen."""
        return [s for s in self.time_slots if s.is_lesson]

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        absences = sum(len(t.absences) for t in self.teachers)
        lessons = sum(c.lesson_count for c in self.classes)
        lines = [
            f"Zeitslots: {len(self.time_slots)} "
            f"({len(self.lesson_slots)} Stunden, "
            f"{len(self.time_slots) - len(self.lesson_slots)} Pausen)",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Klassen: {len(self.classes)} ({lessons} Stunden/Woche)",
            f"Abwesenheiten: {absences}",
            f"Vertretungen: {len(self.substitutions)}",
        ]
        return "\n".join(lines)

    # ─── Konsistenz-Check ───

    def validate_consistency(self) -> ConsistencyReport:
        """Prüft Zeitraster und Querverweise des Datensatzes.

        Prüfungen:
        1. Zeitraster: eindeutig, sortiert, überschneidungsfrei
        2. Stundenpläne: Slot-Zeiten existieren im Raster und sind keine Pausen
        3. Verweise: Klassen und Lehrkräfte der Stunden existieren
        4. Klassen- und Lehrerplan stimmen überein
        5. Doppelbelegung einer Lehrkraft (außer gemeinsame Major-Schiene)
        6. Stunden außerhalb der erklärten Verfügbarkeit
        7. Vertretungen verweisen auf existierende Klassen und Lehrkräfte
        """
        errors: list[str] = check_time_grid(self.time_slots)
        warnings: list[str] = []

        class_ids = {c.id for c in self.classes}
        teacher_ids = {t.id for t in self.teachers}

        def check_slot_keys(owner: str, schedule) -> None:
            for day, slots in schedule.items():
                for time, lessons in slots.items():
                    if not lessons:
                        continue
                    slot = find_slot(self.time_slots, time, lessons_only=False)
                    if slot is None:
                        warnings.append(f"{owner}: {day} {time} verweist auf keinen Zeitslot.")
                    elif not slot.is_lesson:
                        warnings.append(f"{owner}: {day} {time} liegt in einer Pause.")

        # ── 2./3./4. Lehrerpläne ─────────────────────────────────────────────
        for teacher in self.teachers:
            owner = f"Lehrkraft {teacher.id} ({teacher.name})"
            check_slot_keys(owner, teacher.schedule)
            for day, slots in teacher.schedule.items():
                for time, lessons in slots.items():
                    for lesson in lessons:
                        if lesson.class_id not in class_ids:
                            warnings.append(
                                f"{owner}: {day} {time} verweist auf unbekannte Klasse "
                                f"'{lesson.class_id}'."
                            )
                            continue
                        cls = self.school_class(lesson.class_id)
                        mirrored = any(
                            l.teacher_id == teacher.id for l in cls.lessons_at(day, time)
                        )
                        if not mirrored:
                            warnings.append(
                                f"{owner}: {day} {time} ({lesson.subject}) fehlt im Plan "
                                f"der Klasse {cls.name}."
                            )

            # ── 6. Verfügbarkeit ─────────────────────────────────────────────
            for day, slots in teacher.schedule.items():
                day_availability = teacher.availability_for(day)
                for time, lessons in slots.items():
                    slot = find_slot(self.time_slots, time)
                    if not lessons or slot is None:
                        continue
                    if day_availability is None or not day_availability.covers(slot):
                        warnings.append(
                            f"{owner}: Stunde {day} {time} liegt außerhalb der "
                            f"erklärten Verfügbarkeit."
                        )

        # ── 2./3./4./5. Klassenpläne ─────────────────────────────────────────
        busy: dict[tuple[str, str, str], list[tuple[str, Optional[str]]]] = {}
        for cls in self.classes:
            owner = f"Klasse {cls.name}"
            check_slot_keys(owner, cls.schedule)
            for day, slots in cls.schedule.items():
                for time, lessons in slots.items():
                    for lesson in lessons:
                        if lesson.teacher_id not in teacher_ids:
                            warnings.append(
                                f"{owner}: {day} {time} verweist auf unbekannte Lehrkraft "
                                f"'{lesson.teacher_id}'."
                            )
                            continue
                        teacher = self.teacher(lesson.teacher_id)
                        mirrored = any(
                            l.class_id == cls.id for l in teacher.lessons_at(day, time)
                        )
                        if not mirrored:
                            warnings.append(
                                f"{owner}: {day} {time} ({lesson.subject}) fehlt im Plan "
                                f"von {teacher.name}."
                            )
                        busy.setdefault((lesson.teacher_id, day, time), []).append(
                            (cls.id, lesson.major_id)
                        )

        for (teacher_id, day, time), entries in busy.items():
            if len(entries) < 2:
                continue
            majors = {major_id for _, major_id in entries}
            if len(majors) == 1 and None not in majors:
                continue  # Major-Schiene: eine Lehrkraft, mehrere Klassen
            warnings.append(
                f"Lehrkraft {teacher_id}: {day} {time} doppelt belegt "
                f"({', '.join(class_id for class_id, _ in entries)})."
            )

        # ── 7. Vertretungen ──────────────────────────────────────────────────
        for sub in self.substitutions:
            if sub.class_id not in class_ids:
                warnings.append(
                    f"Vertretung {sub.id}: unbekannte Klasse '{sub.class_id}'."
                )
            if sub.substitute_teacher_id not in teacher_ids:
                warnings.append(
                    f"Vertretung {sub.id}: unbekannte Vertretungslehrkraft "
                    f"'{sub.substitute_teacher_id}'."
                )

        return ConsistencyReport(
            is_consistent=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    # ─── Änderungen (liefern neuen Datensatz) ──────────────────────────────

    def mark_absent(self, teacher_id: str, absences: list[AbsenceDay]) -> "SchoolData":
        """Trägt Abwesenheiten ein.

        Bestehende Abwesenheiten an den Tagen der neuen Einträge werden
        ersetzt, nicht ergänzt. Andere Tage bleiben erhalten.
        """
        teacher = self.teacher(teacher_id)
        if teacher is None:
            raise KeyError(f"Lehrkraft '{teacher_id}' nicht gefunden.")
        replaced_days = {a.date for a in absences}
        kept = [a for a in teacher.absences if a.date not in replaced_days]
        updated = teacher.model_copy(update={"absences": kept + list(absences)})
        return self._replace_teacher(updated)

    def clear_absences(self, teacher_id: str, day: date) -> "SchoolData":
        """Entfernt alle Abwesenheiten einer Lehrkraft an einem Tag."""
        teacher = self.teacher(teacher_id)
        if teacher is None:
            raise KeyError(f"Lehrkraft '{teacher_id}' nicht gefunden.")
        kept = [a for a in teacher.absences if a.date != day]
        return self._replace_teacher(teacher.model_copy(update={"absences": kept}))

    def add_substitution(self, record: SubstitutionRecord) -> "SchoolData":
        """Hängt eine bestätigte Vertretung an."""
        if record.created_at is None:
            record = record.model_copy(update={"created_at": datetime.now(timezone.utc)})
        return self.model_copy(update={"substitutions": [*self.substitutions, record]})

    def _replace_teacher(self, updated: Teacher) -> "SchoolData":
        teachers = [updated if t.id == updated.id else t for t in self.teachers]
        return self.model_copy(update={"teachers": teachers})

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "SchoolData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
