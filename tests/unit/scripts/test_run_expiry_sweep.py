from datetime import date, datetime
import importlib.util
import sys
from pathlib import Path

import pytest

from src.expiry_tracker.notifications.notifications_models import SweepReport


PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "run_expiry_sweep.py"
SPEC = importlib.util.spec_from_file_location("run_expiry_sweep_module", MODULE_PATH)
run_expiry_sweep = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["run_expiry_sweep_module"] = run_expiry_sweep
SPEC.loader.exec_module(run_expiry_sweep)


class DummyRecord:
    def __init__(self, name):
        self.name = name


class DummyConfig:
    def __init__(self):
        self.session_factory = object()


class DummyRepo:
    def __init__(self, session_factory):
        assert session_factory is not None

    def list_by_expiry_date(self, day):
        assert day == date(2026, 10, 20)
        return [DummyRecord("Eggs"), DummyRecord("Yogurt")]


class DummySweeper:
    def __init__(self):
        self.calls = []

    async def run_once(self, now):
        self.calls.append(now)
        report = SweepReport(target_date=date(2026, 10, 20), products=["Eggs"])
        return report


def test_perform_sweep_dry_run(monkeypatch):
    monkeypatch.setattr(run_expiry_sweep, "load_config", lambda: DummyConfig())
    monkeypatch.setattr(run_expiry_sweep, "ProductRepository", DummyRepo)

    def fail_build(config, repo):
        raise AssertionError("dry run must not build senders")

    monkeypatch.setattr(run_expiry_sweep, "build_sweeper", fail_build)

    summary = run_expiry_sweep.perform_sweep(
        dry_run=True, reference_time=datetime(2026, 10, 19, 8, 0)
    )

    assert summary.dry_run is True
    assert summary.target_date == "2026-10-20"
    assert summary.products == ["Eggs", "Yogurt"]
    assert summary.delivered == 0


def test_perform_sweep_runs_sweeper(monkeypatch):
    sweeper = DummySweeper()
    monkeypatch.setattr(run_expiry_sweep, "load_config", lambda: DummyConfig())
    monkeypatch.setattr(run_expiry_sweep, "ProductRepository", DummyRepo)
    monkeypatch.setattr(run_expiry_sweep, "build_sweeper", lambda config, repo: sweeper)

    now = datetime(2026, 10, 19, 8, 0)
    summary = run_expiry_sweep.perform_sweep(dry_run=False, reference_time=now)

    assert summary.dry_run is False
    assert summary.products == ["Eggs"]
    assert sweeper.calls == [now]


def test_main_reports_failure(monkeypatch, capsys):
    def boom(**kwargs):
        raise RuntimeError("database locked")

    monkeypatch.setattr(run_expiry_sweep, "perform_sweep", boom)

    assert run_expiry_sweep.main(["--dry-run"]) == 2
    assert "database locked" in capsys.readouterr().err


def test_help_warns_about_in_app_sweep(capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_expiry_sweep.parse_args(["--help"])

    assert excinfo.value.code == 0
    assert "SWEEP_ENABLED=false" in capsys.readouterr().out
