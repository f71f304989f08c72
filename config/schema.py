from pydantic import BaseModel, Field


# ─── BEWERTUNG (Vertretungsvorschlag) ───

class ScoringConfig(BaseModel):
    """Gewichte und Schlüsselwörter für die Bewertung von Vertretungskandidaten.

    Die Schlüsselwörter werden als wörtliche Teilstrings im Freitext
    preferences gesucht (Groß-/Kleinschreibung zählt).
    """
    # Punkte für Fachqualifikation (Fach steht in subjects)
    weight_qualified: int = Field(10, ge=0,
        description="Punkte: Lehrkraft unterrichtet das Fach")
    # Punkte wenn preferences den Oberstufen-Marker enthält
    weight_senior_classes: int = Field(2, ge=0,
        description="Punkte: Erfahrung mit älteren Klassen")
    # Punkte für Förder-Marker, nur wenn die Stunde selbst Förderunterricht ist
    weight_special_education: int = Field(5, ge=0,
        description="Punkte: Förderunterricht-Erfahrung bei Förderstunde")
    # Marker im Freitext für Erfahrung mit älteren Klassen
    senior_classes_marker: str = Field("senior classes",
        description="Marker für Erfahrung mit älteren Klassen")
    # Marker im Freitext für Förderunterricht-Erfahrung
    special_education_marker: str = Field("special education",
        description="Marker für Förderunterricht-Erfahrung")
    # Fachbezeichnung des Förderunterrichts
    special_education_subject: str = Field("special education",
        description="Fachname Förderunterricht")


# ─── PFADE ───

class PathConfig(BaseModel):
    """Ablageorte für Datensatz und Exporte."""
    # JSON-Datensatz (Lehrkräfte, Klassen, Zeitraster, Vertretungen)
    data_json: str = Field("output/school_data.json",
        description="Pfad zum JSON-Datensatz")
    # Verzeichnis für Excel-Exporte
    export_dir: str = Field("output",
        description="Verzeichnis für Exporte")


# ─── GESAMT-CONFIG ───

class EngineConfig(BaseModel):
    """Gesamtkonfiguration des Vertretungsplaners."""
    # Name der Schule (für Überschriften in Exporten)
    school_name: str = Field("Demo School",
        description="Name der Schule")
    # Bewertung der Vertretungskandidaten
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    # Ablageorte
    paths: PathConfig = Field(default_factory=PathConfig)
