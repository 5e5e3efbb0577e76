import os

import pytest

from chatcal.event_models import Event, Schedule


@pytest.fixture(scope="session", autouse=True)
def isolated_log_dir(tmp_path_factory):
    # Keep log files out of the user's home while testing
    log_dir = tmp_path_factory.mktemp("logs")
    with pytest.MonkeyPatch.context() as patch:
        patch.setenv("CHATCAL_LOG_DIR", str(log_dir))
        yield log_dir


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("CHATCAL_SETTINGS_DIR", str(tmp_path / "settings"))
    monkeypatch.delenv("USE_STUB", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return tmp_path / "settings"


@pytest.fixture
def gym_event():
    return Event(title="Gym", start_local="2026-02-09T07:00", end_local="2026-02-09T08:00")


@pytest.fixture
def gym_schedule(gym_event):
    return Schedule(timezone="America/New_York", events=(gym_event,))
