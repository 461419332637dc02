from pydantic import BaseModel, Field, field_validator
from typing import Optional


# ─── ABGLEICH (Fächer / Zeitfenster) ───

class MatchingConfig(BaseModel):
    """Regeln für den Fächer-Abgleich zwischen Lehrkraft und Sitzung."""
    # Namensabgleich (ohne Groß-/Kleinschreibung) wenn eine Fach-ID fehlt.
    # Verlustbehaftet: zwei verschiedene Fächer mit gleichem Namen gelten als gleich.
    subject_name_fallback: bool = Field(True,
        description="Fächer ohne ID per Name abgleichen (degradierter Modus)")


# ─── KAPAZITÄT (Quoten + Bedarf) ───

class CapacityConfig(BaseModel):
    """Aufsichtsquoten und Parameter der Bedarfs-/Quoten-Policies."""
    # Quote für Lehrkräfte ohne eigene Angabe (None = unbegrenzt)
    default_quota: Optional[int] = Field(None, ge=0,
        description="Standard-Aufsichtsquote (None = unbegrenzt)")
    # Bedarfs-Policy: Aufsichten pro Prüfung einer Sitzung
    supervisors_per_exam: int = Field(2, ge=0, le=10,
        description="Aufsichten pro Prüfung (Bedarfs-Policy)")
    # Quoten-Policy: Untergrenze der berechneten Quote
    min_quota: int = Field(3, ge=0,
        description="Mindestquote (Quoten-Policy)")
    # Quoten-Policy: Lehrdeputat / divisor
    teaching_load_divisor: float = Field(10.0, gt=0,
        description="Teiler für das Lehrdeputat (Quoten-Policy)")
    # Quoten-Policy: Zuschlag pro Sitzung, in der eigene Fächer geprüft werden
    subject_session_weight: float = Field(0.1, ge=0,
        description="Zuschlag pro Sitzung mit eigenen Fächern (Quoten-Policy)")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Protokollierung."""
    # Log-Level für die CLI (DEBUG, INFO, WARNING, ERROR)
    level: str = Field("WARNING", description="Log-Level")

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unbekanntes Log-Level: {v}")
        return v


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Ablage des Datensatz-Schnappschusses."""
    # Pfad der JSON-Datei mit Lehrkräften, Sitzungen, Wünschen und Zuweisungen
    data_path: str = Field("output/supervision_data.json",
        description="Pfad zum JSON-Datensatz")


# ─── GESAMT-CONFIG ───

class EngineConfig(BaseModel):
    """Gesamtkonfiguration der Aufsichtsplanung."""
    # Name der Einrichtung
    institution_name: str = Field("Muster-Fakultät",
        description="Name der Einrichtung")
    # Bezeichnung der Prüfungsperiode
    exam_period: str = Field("Session principale",
        description="Bezeichnung der Prüfungsperiode")
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    capacity: CapacityConfig = Field(default_factory=CapacityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
