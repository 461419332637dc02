from datetime import time

from config.schema import (
    CapacityConfig,
    EngineConfig,
    LoggingConfig,
    MatchingConfig,
    StorageConfig,
)


# Sitzungsraster eines Prüfungstages (Beginn, Ende).
#   Sitzung 1  08:30 - 10:00
#   Sitzung 2  10:30 - 12:00
#   Sitzung 3  13:00 - 14:30
#   Sitzung 4  15:00 - 16:30
DEFAULT_SESSION_WINDOWS: list[tuple[time, time]] = [
    (time(8, 30), time(10, 0)),
    (time(10, 30), time(12, 0)),
    (time(13, 0), time(14, 30)),
    (time(15, 0), time(16, 30)),
]


# Fächerkatalog: Kürzel → Name
SUBJECT_CATALOG: dict[str, str] = {
    "MAT1": "Mathématiques 1",
    "MAT2": "Mathématiques 2",
    "STAT": "Statistique",
    "ECO1": "Microéconomie",
    "ECO2": "Macroéconomie",
    "GEST": "Gestion financière",
    "COMP": "Comptabilité",
    "MKT":  "Marketing",
    "DRT":  "Droit des affaires",
    "INF":  "Informatique de gestion",
    "ANG":  "Anglais",
    "FRA":  "Techniques de communication",
}

# Dienstgrade mit typischem Lehrdeputat (Stunden pro Semester)
GRADE_TEACHING_LOAD: dict[str, float] = {
    "PES": 77.0,    # Professeur de l'enseignement supérieur
    "MC":  77.0,    # Maître de conférences
    "MA":  126.0,   # Maître assistant
    "AS":  154.0,   # Assistant
    "PTC": 48.0,    # Vacataire
}


def default_engine_config() -> EngineConfig:
    """Standard-Konfiguration für eine Fakultät."""
    return EngineConfig(
        institution_name="Muster-Fakultät",
        exam_period="Session principale",
        matching=MatchingConfig(subject_name_fallback=True),
        capacity=CapacityConfig(
            default_quota=None,
            supervisors_per_exam=2,
            min_quota=3,
            teaching_load_divisor=10.0,
            subject_session_weight=0.1,
        ),
        logging=LoggingConfig(level="WARNING"),
        storage=StorageConfig(data_path="output/supervision_data.json"),
    )
