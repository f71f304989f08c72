from models.timeslot import SlotType, TimeSlot
from config.schema import EngineConfig, PathConfig, ScoringConfig


def default_time_slots() -> list[TimeSlot]:
    """Standard-Tagesraster der Demo-Schule.

    Tagesraster:
    1. Stunde  08:00 - 08:45
    2. Stunde  08:45 - 09:30
       ── Pause 09:30 - 09:45 ──
    3. Stunde  09:45 - 10:30
    4. Stunde  10:30 - 11:15
    5. Stunde  11:15 - 12:00
    """
    return [
        TimeSlot(id="1", start="08:00", end="08:45"),
        TimeSlot(id="2", start="08:45", end="09:30"),
        TimeSlot(id="3", start="09:30", end="09:45", type=SlotType.BREAK),
        TimeSlot(id="4", start="09:45", end="10:30"),
        TimeSlot(id="5", start="10:30", end="11:15"),
        TimeSlot(id="6", start="11:15", end="12:00"),
    ]


def default_scoring() -> ScoringConfig:
    return ScoringConfig()


def default_engine_config() -> EngineConfig:
    """Vollständige Default-Konfiguration."""
    return EngineConfig(
        school_name="Demo School",
        scoring=default_scoring(),
        paths=PathConfig(),
    )

