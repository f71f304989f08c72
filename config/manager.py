"""Konfigurationsmanager: Laden, Speichern und Validieren der Planer-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_engine_config
from config.schema import EngineConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Vertretungsplaner — Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "scoring": (
        "Bewertung",
        "Punkte für Vertretungskandidaten. Marker sind wörtliche Teilstrings\n"
        "im Freitext 'preferences' (Groß-/Kleinschreibung zählt).",
    ),
    "paths": (
        "Pfade",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "engine_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        if path is not None:
            self.DEFAULT_CONFIG = Path(path)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> EngineConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus, um sie anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Erwartet wird eine Zuordnung auf oberster Ebene, nicht {type(raw).__name__}."
            )
        try:
            return EngineConfig.model_validate(dict(raw))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self) -> EngineConfig:
        """Lädt die Config, oder die Defaults wenn noch keine Datei existiert."""
        if self.first_run_check():
            return default_engine_config()
        return self.load()

    # ─── Speichern ───

    def save(self, config: EngineConfig, path: Optional[Path] = None) -> Path:
        """Speichere Config als YAML mit Kommentaren."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")
        return target

    def _build_commented_yaml(self, config: EngineConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        return cm
