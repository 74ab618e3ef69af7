import logging
from datetime import datetime
from pathlib import Path

import pytest

from helpers import T0


@pytest.fixture(autouse=True)
def clean_env_and_state(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached env views.
    """

    keys = [
        "ROLLPURGE_DIR",
        "ROLLPURGE_BASE_NAME",
        "ROLLPURGE_CAP",
        "ROLLPURGE_LOGS_DIR",
        "ROLLPURGE_COMMAND",
        "ROLLPURGE_RUN_ID",
        "ROLLPURGE_VERBOSE",
        "ROLLPURGE_QUIET",
        "ROLLPURGE_DRY_RUN",
        "LOG_LEVEL",
        "LOG_RETENTION",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    # Never pick up a developer's .env
    monkeypatch.setenv("ROLLPURGE_ENV_FILE", str(tmp_path / "missing.env"))

    import rollpurge.bootstrap
    import rollpurge.env
    import rollpurge.logger

    rollpurge.bootstrap._BOOTSTRAPPED = False
    rollpurge.env.reset_env_caches()

    rollpurge.logger._INITIALIZED = False
    rollpurge.logger._LOG_FILE_PATH = None

    yield

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    rollpurge.env.reset_env_caches()


@pytest.fixture
def creation_times(monkeypatch):
    """
    Pin creation times by file name; unnamed files get T0.

    Filesystems cannot set a birth time, so ranking tests inject it.
    """
    import rollpurge.purger

    times: dict[str, datetime] = {}
    calls: list[str] = []

    def fake(path):
        name = Path(path).name
        calls.append(name)
        return times.get(name, T0)

    monkeypatch.setattr(rollpurge.purger, "read_creation_time", fake)
    fake.times = times
    fake.calls = calls
    return fake
