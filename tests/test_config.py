"""Tests für Konfiguration, Datenmodelle und Testdaten-Generator."""

from datetime import date, time
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.schema import (
    CapacityConfig,
    EngineConfig,
    LoggingConfig,
    MatchingConfig,
)
from config.defaults import (
    DEFAULT_SESSION_WINDOWS,
    GRADE_TEACHING_LOAD,
    SUBJECT_CATALOG,
    default_engine_config,
)
from config.manager import ConfigManager
from models import (
    Exam,
    Session,
    Subject,
    SupervisionData,
    Teacher,
    TimeWindow,
)


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_engine_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_engine_config()
        assert config.institution_name == "Muster-Fakultät"
        assert config.matching.subject_name_fallback is True
        assert config.capacity.default_quota is None
        assert config.capacity.supervisors_per_exam == 2
        assert config.logging.level == "WARNING"

    def test_default_matches_model_defaults(self):
        assert default_engine_config() == EngineConfig()

    def test_session_windows_ordered_and_disjoint(self):
        """Das Sitzungsraster eines Tages ist aufsteigend und überschneidungsfrei."""
        for start, end in DEFAULT_SESSION_WINDOWS:
            assert start < end
        for (_, end), (next_start, _) in zip(DEFAULT_SESSION_WINDOWS, DEFAULT_SESSION_WINDOWS[1:]):
            assert end <= next_start

    def test_catalog_and_grades_not_empty(self):
        assert len(SUBJECT_CATALOG) >= 10
        assert all(load > 0 for load in GRADE_TEACHING_LOAD.values())


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_negative_default_quota(self):
        with pytest.raises(ValidationError):
            CapacityConfig(default_quota=-1)

    def test_zero_divisor_rejected(self):
        with pytest.raises(ValidationError):
            CapacityConfig(teaching_load_divisor=0)

    def test_window_start_before_end(self):
        with pytest.raises(ValidationError):
            TimeWindow(date=date(2025, 1, 6), start=time(10, 0), end=time(9, 0))

    def test_window_is_frozen(self):
        w = TimeWindow(date=date(2025, 1, 6), start=time(8, 0), end=time(9, 0))
        with pytest.raises(ValidationError):
            w.start = time(7, 0)

    def test_session_rejects_negative_counters(self):
        with pytest.raises(ValidationError):
            Session(id="S1", date=date(2025, 1, 6), start=time(8, 0), registered=-1)
        with pytest.raises(ValidationError):
            Session(id="S1", date=date(2025, 1, 6), start=time(8, 0), required=-1)

    def test_exam_must_belong_to_session(self):
        with pytest.raises(ValidationError):
            Session(
                id="S1", date=date(2025, 1, 6), start=time(8, 0),
                exams=[Exam(id="E1", session_id="S2", subject=Subject(name="X"))],
            )

    def test_teacher_quota_non_negative(self):
        with pytest.raises(ValidationError):
            Teacher(id="T1", name="A", quota=-1)


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren — vollständiger Roundtrip."""
        config = EngineConfig(
            institution_name="FSEG Sfax",
            matching=MatchingConfig(subject_name_fallback=False),
            capacity=CapacityConfig(default_quota=6, supervisors_per_exam=3),
        )
        mgr = ConfigManager(tmp_path / "engine_config.yaml")

        path = mgr.save(config)
        assert path.exists()

        loaded = mgr.load()
        assert loaded == config

    def test_saved_yaml_has_comments(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "engine_config.yaml")
        mgr.save(default_engine_config())
        text = mgr.path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Fächer-Abgleich" in text
        assert "subject_name_fallback: true" in text

    def test_first_run_check(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "engine_config.yaml")
        assert mgr.first_run_check() is True
        mgr.save(default_engine_config())
        assert mgr.first_run_check() is False

    def test_load_or_default_without_file(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "missing.yaml")
        assert mgr.load_or_default() == default_engine_config()

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("capacity:\n  supervisors_per_exam: -4\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(bad).load()

    def test_partial_yaml_uses_defaults(self, tmp_path: Path):
        partial = tmp_path / "partial.yaml"
        partial.write_text("institution_name: Test\n", encoding="utf-8")
        config = ConfigManager(partial).load()
        assert config.institution_name == "Test"
        assert config.capacity.min_quota == 3


# ─── FAKE-DATEN ───────────────────────────────────────────────────────────────

class TestFakeData:
    def _generate(self, **kwargs) -> SupervisionData:
        from data.fake_data import FakeDataGenerator
        return FakeDataGenerator(default_engine_config(), seed=42, **kwargs).generate()

    def test_generate_returns_supervision_data(self):
        data = self._generate()
        assert isinstance(data, SupervisionData)
        assert len(data.subjects) == len(SUBJECT_CATALOG)

    def test_session_and_teacher_counts(self):
        data = self._generate(num_days=3, num_teachers=12)
        assert len(data.sessions) == 3 * len(DEFAULT_SESSION_WINDOWS)
        assert len(data.teachers) == 12

    def test_exam_days_skip_weekend(self):
        data = self._generate(num_days=6, start_date=date(2025, 1, 9))
        assert all(s.date.weekday() < 5 for s in data.sessions)

    def test_required_follows_exam_count(self):
        data = self._generate()
        for s in data.sessions:
            assert s.required == len(s.exams) * 2

    def test_quotas_computed(self):
        data = self._generate()
        assert all(t.quota is not None and t.quota >= 3 for t in data.teachers)

    def test_fresh_data_is_consistent(self):
        data = self._generate()
        report = data.check_consistency()
        assert report.is_consistent
        assert data.wishes == []
        assert all(s.registered == 0 for s in data.sessions)

    def test_reproducible_with_seed(self):
        a = self._generate()
        b = self._generate()
        assert [t.name for t in a.teachers] == [t.name for t in b.teachers]
        assert [len(s.exams) for s in a.sessions] == [len(s.exams) for s in b.sessions]

    def test_open_ended_last_session(self):
        data = self._generate(num_days=2, open_ended_last_session=True)
        open_ended = [s for s in data.sessions if s.end is None]
        assert len(open_ended) == 2
        assert any("Endzeit" in w for w in data.check_consistency().warnings)

    def test_json_roundtrip(self, tmp_path: Path):
        data = self._generate(num_days=1)
        path = tmp_path / "data.json"
        data.save_json(path)
        loaded = SupervisionData.load_json(path)
        assert [s.id for s in loaded.sessions] == [s.id for s in data.sessions]
        assert loaded.created_at is not None

    def test_summary_contains_key_info(self):
        text = self._generate(num_days=1).summary()
        assert "Sitzungen: 4" in text
        assert "Lehrkräfte: 30" in text
