import dataclasses
import io
import sys
from contextlib import redirect_stderr, redirect_stdout
from datetime import datetime

import pytest

from questlog import config, db
from questlog.engine import QuestEngine
from questlog.lib import clock
from questlog.lib.calendar import Calendar
from questlog.repository import MemoryRepository


@dataclasses.dataclass
class CLIResult:
    exit_code: int
    stdout: str
    stderr: str


class FnCLIRunner:
    def invoke(self, args: list[str]) -> CLIResult:
        from questlog.cli import main

        out, err = io.StringIO(), io.StringIO()
        argv = sys.argv
        sys.argv = ["questlog", *args]
        code: int = 0
        try:
            with redirect_stdout(out), redirect_stderr(err):
                main()
        except SystemExit as e:
            code = e.code if isinstance(e.code, int) else (0 if e.code is None else 1)
        finally:
            sys.argv = argv
        return CLIResult(exit_code=code, stdout=out.getvalue(), stderr=err.getvalue())


@pytest.fixture
def tmp_questlog_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "QUESTLOG_DIR", tmp_path)
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "store.db")
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.yaml")
    monkeypatch.setattr(config, "BACKUP_DIR", tmp_path / "backups")
    db.init()
    return tmp_path


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin clock.now(); call the returned setter to move time."""
    state = {"now": datetime(2025, 3, 12, 9, 0)}

    def set_now(value: datetime) -> None:
        state["now"] = value

    monkeypatch.setattr(clock, "now", lambda: state["now"])
    return set_now


@pytest.fixture
def calendar():
    return Calendar(week_start=1)


@pytest.fixture
def memory_repo():
    return MemoryRepository()


@pytest.fixture
def engine(memory_repo, calendar):
    return QuestEngine(memory_repo, calendar)
