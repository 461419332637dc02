"""Tests für die Kommandozeile (click CliRunner)."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from main import cli
from models.supervision_data import SupervisionData


@pytest.fixture
def paths(tmp_path: Path) -> list[str]:
    return [
        "--config", str(tmp_path / "engine_config.yaml"),
        "--data", str(tmp_path / "data.json"),
    ]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _generate(runner: CliRunner, paths: list[str]) -> SupervisionData:
    result = runner.invoke(cli, paths + ["generate", "--seed", "7", "--days", "2", "--teachers", "8"])
    assert result.exit_code == 0, result.output
    return SupervisionData.load_json(Path(paths[3]))


def _eligible_pair(data: SupervisionData) -> tuple[str, str]:
    from engine.ledger import AssignmentLedger
    ledger = AssignmentLedger(data)
    for s in ledger.sessions:
        eligible = ledger.eligible_teachers(s.id)
        if eligible:
            return eligible[0].id, s.id
    raise AssertionError("Kein geeignetes Paar in den Testdaten")


class TestConfigCommands:
    def test_config_init_and_show(self, runner, paths, tmp_path):
        result = runner.invoke(cli, paths + ["config", "init"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "engine_config.yaml").exists()

        result = runner.invoke(cli, paths + ["config", "show"])
        assert result.exit_code == 0
        assert "Muster-Fakultät" in result.output

    def test_config_init_does_not_overwrite(self, runner, paths):
        runner.invoke(cli, paths + ["config", "init"])
        result = runner.invoke(cli, paths + ["config", "init"])
        assert result.exit_code == 0
        assert "existiert bereits" in result.output


class TestDataCommands:
    def test_generate_writes_json(self, runner, paths):
        data = _generate(runner, paths)
        assert len(data.sessions) == 8
        assert len(data.teachers) == 8

    def test_status_without_data_fails(self, runner, paths):
        result = runner.invoke(cli, paths + ["status"])
        assert result.exit_code == 1

    def test_status(self, runner, paths):
        _generate(runner, paths)
        result = runner.invoke(cli, paths + ["status"])
        assert result.exit_code == 0
        assert "S01-1" in result.output

    def test_validate_fresh_data(self, runner, paths):
        _generate(runner, paths)
        result = runner.invoke(cli, paths + ["validate"])
        assert result.exit_code == 0, result.output


class TestLedgerCommands:
    def test_wish_confirm_cancel_cycle(self, runner, paths):
        data = _generate(runner, paths)
        teacher_id, session_id = _eligible_pair(data)

        result = runner.invoke(cli, paths + ["wish", teacher_id, session_id])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(Path(paths[3]))
        assert len(saved.wishes) == 1

        result = runner.invoke(cli, paths + ["confirm", teacher_id, session_id])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(Path(paths[3]))
        assert saved.wishes == []
        assert next(s for s in saved.sessions if s.id == session_id).registered == 1

        result = runner.invoke(cli, paths + ["cancel", teacher_id, session_id])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(Path(paths[3]))
        assert next(s for s in saved.sessions if s.id == session_id).registered == 0

    def test_duplicate_wish_exits_with_error(self, runner, paths):
        data = _generate(runner, paths)
        teacher_id, session_id = _eligible_pair(data)
        runner.invoke(cli, paths + ["wish", teacher_id, session_id])
        result = runner.invoke(cli, paths + ["wish", teacher_id, session_id])
        assert result.exit_code == 1
        assert "Abgelehnt" in result.output

    def test_withdraw_without_wish_fails(self, runner, paths):
        data = _generate(runner, paths)
        teacher_id, session_id = _eligible_pair(data)
        result = runner.invoke(cli, paths + ["withdraw", teacher_id, session_id])
        assert result.exit_code == 1

    def test_cancel_unassigned_fails_and_keeps_file(self, runner, paths):
        data = _generate(runner, paths)
        teacher_id, session_id = _eligible_pair(data)
        before = Path(paths[3]).read_text(encoding="utf-8")
        result = runner.invoke(cli, paths + ["cancel", teacher_id, session_id])
        assert result.exit_code == 1
        assert Path(paths[3]).read_text(encoding="utf-8") == before

    def test_unknown_teacher(self, runner, paths):
        _generate(runner, paths)
        result = runner.invoke(cli, paths + ["check", "NOPE", "S01-1"])
        assert result.exit_code == 1
        assert "Unbekannte Lehrkraft" in result.output

    def test_revise_and_recalc(self, runner, paths):
        _generate(runner, paths)
        result = runner.invoke(cli, paths + ["revise", "S01-1", "0"])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(Path(paths[3]))
        assert next(s for s in saved.sessions if s.id == "S01-1").required == 0

        result = runner.invoke(cli, paths + ["recalc"])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(Path(paths[3]))
        s = next(s for s in saved.sessions if s.id == "S01-1")
        assert s.required == len(s.exams) * 2

    def test_revise_negative_rejected(self, runner, paths):
        _generate(runner, paths)
        result = runner.invoke(cli, paths + ["revise", "--", "S01-1", "-3"])
        assert result.exit_code == 1

    def test_query_commands(self, runner, paths):
        data = _generate(runner, paths)
        teacher_id, session_id = _eligible_pair(data)
        for args in (
            ["check", teacher_id, session_id],
            ["eligible", session_id],
            ["sessions", teacher_id],
            ["candidates", session_id],
        ):
            result = runner.invoke(cli, paths + args)
            assert result.exit_code == 0, (args, result.output)


class TestConfigSource:
    """Die YAML-Konfiguration gilt auch für Datensätze mit eigener Config im JSON."""

    def _write_name_only_data(self, path: Path) -> None:
        from datetime import date, time

        from models import Exam, Session, Subject, Teacher

        SupervisionData(
            teachers=[Teacher(id="T", name="Legacy", subjects=[Subject(name="Math")])],
            sessions=[Session(
                id="S", date=date(2025, 1, 6), start=time(8, 0), end=time(10, 0),
                exams=[Exam(id="E", session_id="S", subject=Subject(id="M1", name="math"))],
                required=2,
            )],
        ).save_json(path)

    def test_yaml_disables_name_fallback(self, runner, paths, tmp_path):
        from config.manager import ConfigManager
        from config.schema import EngineConfig, MatchingConfig

        ConfigManager(tmp_path / "engine_config.yaml").save(
            EngineConfig(matching=MatchingConfig(subject_name_fallback=False))
        )
        self._write_name_only_data(tmp_path / "data.json")

        result = runner.invoke(cli, paths + ["wish", "T", "S"])
        assert result.exit_code == 0, result.output
        saved = SupervisionData.load_json(tmp_path / "data.json")
        assert saved.config.matching.subject_name_fallback is False

    def test_default_config_keeps_name_fallback(self, runner, paths, tmp_path):
        self._write_name_only_data(tmp_path / "data.json")
        result = runner.invoke(cli, paths + ["wish", "T", "S"])
        assert result.exit_code == 1
        assert "Fachkonflikt" in result.output
