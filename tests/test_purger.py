import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

import rollpurge.purger
from rollpurge import InvalidArgument, RollingFilePurger
from rollpurge.purger import EARLIEST, read_creation_time, try_delete

from helpers import T0, make_files, remaining


def failing_remove(monkeypatch, names, exc=PermissionError):
    """Make os.remove fail for the given file names; record every attempt."""
    real_remove = os.remove
    attempts: list[str] = []

    def fake(path, *args, **kwargs):
        name = Path(path).name
        attempts.append(name)
        if name in names:
            raise exc(f"simulated failure: {name}")
        return real_remove(path, *args, **kwargs)

    monkeypatch.setattr(rollpurge.purger.os, "remove", fake)
    return attempts


# ----------------------------
# Construction
# ----------------------------


@pytest.mark.parametrize(
    "directory, base, cap",
    [
        (None, "app.log", 1),
        ("", "app.log", 1),
        ("/logs", None, 1),
        ("/logs", "", 1),
        ("/logs", "app.log", 0),
        ("/logs", "app.log", -3),
        ("/logs", "app.log", True),
        ("/logs", "app.log", "3"),
    ],
)
def test_constructor_rejects_bad_arguments(directory, base, cap):
    with pytest.raises(InvalidArgument):
        RollingFilePurger(directory, base, cap)


def test_constructor_accepts_pathlike(tmp_path):
    purger = RollingFilePurger(tmp_path, "app.log", 1)
    assert purger.directory == tmp_path
    assert purger.search_pattern == "app.*.log"


def test_search_pattern_without_extension(tmp_path):
    assert RollingFilePurger(tmp_path, "app", 1).search_pattern == "app.*"


# ----------------------------
# Fast path
# ----------------------------


def test_nothing_deleted_at_or_below_cap(tmp_path, creation_times):
    make_files(tmp_path, "app.1.log", "app.2.log", "app.3.log")

    RollingFilePurger(tmp_path, "app.log", 3).purge()

    assert remaining(tmp_path) == ["app.1.log", "app.2.log", "app.3.log"]
    # no metadata is read on the fast path
    assert creation_times.calls == []


# ----------------------------
# Retention
# ----------------------------


def test_excess_archives_deleted_by_sequence(tmp_path, creation_times):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))

    RollingFilePurger(tmp_path, "app.log", 3).purge()

    assert remaining(tmp_path) == ["app.3.log", "app.4.log", "app.5.log"]


def test_excess_archives_deleted_by_creation_time(tmp_path, creation_times):
    make_files(tmp_path, "app.1.log", "app.2.log", "app.3.log", "app.4.log")
    # sequence numbers say the opposite of creation times
    for i, name in enumerate(["app.4.log", "app.3.log", "app.2.log", "app.1.log"]):
        creation_times.times[name] = T0 + timedelta(minutes=i)

    RollingFilePurger(tmp_path, "app.log", 2).purge()

    assert remaining(tmp_path) == ["app.1.log", "app.2.log"]


def test_numeric_ranking_keeps_ten_over_nine(tmp_path, creation_times):
    make_files(tmp_path, "app.9.log", "app.10.log")

    RollingFilePurger(tmp_path, "app.log", 1).purge()

    assert remaining(tmp_path) == ["app.10.log"]


def test_text_tokens_keep_highest_ordinal(tmp_path, creation_times):
    make_files(tmp_path, "app.a.log", "app.b.log", "app..log")

    RollingFilePurger(tmp_path, "app.log", 1).purge()

    assert remaining(tmp_path) == ["app.b.log"]


def test_unreadable_creation_time_deleted_first(tmp_path, creation_times):
    make_files(tmp_path, "app.1.log", "app.2.log", "app.3.log")
    creation_times.times["app.3.log"] = EARLIEST

    RollingFilePurger(tmp_path, "app.log", 2).purge()

    assert remaining(tmp_path) == ["app.1.log", "app.2.log"]


def test_exact_excess_count(tmp_path, creation_times):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 11)))

    RollingFilePurger(tmp_path, "app.log", 4).purge()

    assert len(remaining(tmp_path)) == 4


def test_second_purge_deletes_nothing(tmp_path, creation_times, monkeypatch):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))
    purger = RollingFilePurger(tmp_path, "app.log", 2)

    purger.purge()
    attempts = failing_remove(monkeypatch, set())
    purger.purge()

    assert attempts == []
    assert remaining(tmp_path) == ["app.4.log", "app.5.log"]


def test_deletions_follow_rank_order(tmp_path, creation_times, monkeypatch):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))
    attempts = failing_remove(monkeypatch, set())

    RollingFilePurger(tmp_path, "app.log", 2).purge()

    assert attempts == ["app.3.log", "app.2.log", "app.1.log"]


# ----------------------------
# Matching
# ----------------------------


def test_only_matching_archives_are_considered(tmp_path, creation_times):
    make_files(
        tmp_path,
        "app.log",  # active file
        "app.1.log",
        "app.2.log",
        "other.1.log",
        "app.1.txt",
        "App.3.log",
        "app1.log",
    )
    (tmp_path / "app.9.log").mkdir()
    make_files(tmp_path / "nested", "app.7.log", "app.8.log")

    RollingFilePurger(tmp_path, "app.log", 1).purge()

    assert remaining(tmp_path) == [
        "App.3.log",
        "app.1.txt",
        "app.2.log",
        "app.9.log",
        "app.log",
        "app1.log",
        "nested",
        "other.1.log",
    ]
    assert remaining(tmp_path / "nested") == ["app.7.log", "app.8.log"]


def test_base_name_metacharacters_match_literally(tmp_path, creation_times):
    make_files(tmp_path, "app[1].1.log", "app[1].2.log", "app1.1.log", "app1.2.log")

    RollingFilePurger(tmp_path, "app[1].log", 1).purge()

    assert remaining(tmp_path) == ["app1.1.log", "app1.2.log", "app[1].2.log"]


def test_base_name_without_extension(tmp_path, creation_times):
    make_files(tmp_path, "trace", "trace.1", "trace.2", "trace.3")

    RollingFilePurger(tmp_path, "trace", 1).purge()

    # "trace.N" carries a single dot, so every token is "" and all three tie.
    # Ties keep name order under the stable sort, so the first name survives.
    assert remaining(tmp_path) == ["trace", "trace.1"]


# ----------------------------
# Fault tolerance
# ----------------------------


def test_permission_denied_deletions_are_skipped(tmp_path, creation_times, monkeypatch):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))
    attempts = failing_remove(monkeypatch, {"app.1.log", "app.2.log"})

    RollingFilePurger(tmp_path, "app.log", 3).purge()

    assert sorted(attempts) == ["app.1.log", "app.2.log"]
    assert remaining(tmp_path) == [f"app.{i}.log" for i in range(1, 6)]


def test_one_failed_delete_does_not_stop_the_rest(
    tmp_path, creation_times, monkeypatch
):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))
    failing_remove(monkeypatch, {"app.3.log"}, exc=OSError)

    RollingFilePurger(tmp_path, "app.log", 2).purge()

    assert remaining(tmp_path) == ["app.3.log", "app.4.log", "app.5.log"]


def test_missing_directory_is_a_no_op(tmp_path):
    purger = RollingFilePurger(tmp_path / "does-not-exist", "app.log", 1)

    purger.purge()

    assert purger.rank() == []


def test_directory_that_is_a_file_is_a_no_op(tmp_path):
    (tmp_path / "app.log").write_text("x")

    RollingFilePurger(tmp_path / "app.log", "app.log", 1).purge()

    assert (tmp_path / "app.log").exists()


def test_unlistable_directory_is_a_no_op(tmp_path, monkeypatch):
    make_files(tmp_path, "app.1.log", "app.2.log")

    def denied(self):
        raise PermissionError("simulated")

    with monkeypatch.context() as m:
        m.setattr(Path, "iterdir", denied)
        RollingFilePurger(tmp_path, "app.log", 1).purge()

    assert remaining(tmp_path) == ["app.1.log", "app.2.log"]


def test_non_os_errors_propagate(tmp_path, creation_times, monkeypatch):
    make_files(tmp_path, "app.1.log", "app.2.log")

    def broken(path):
        raise RuntimeError("bug")

    monkeypatch.setattr(rollpurge.purger.os, "remove", broken)

    with pytest.raises(RuntimeError):
        RollingFilePurger(tmp_path, "app.log", 1).purge()


# ----------------------------
# Plan / rank
# ----------------------------


def test_plan_matches_purge(tmp_path, creation_times):
    make_files(tmp_path, *(f"app.{i}.log" for i in range(1, 6)))
    purger = RollingFilePurger(tmp_path, "app.log", 2)

    plan = purger.plan()
    assert [a.file_name for a in plan.retained] == ["app.5.log", "app.4.log"]
    assert [a.file_name for a in plan.excess] == ["app.3.log", "app.2.log", "app.1.log"]

    purger.purge()
    assert remaining(tmp_path) == sorted(a.file_name for a in plan.retained)


def test_plan_below_cap_has_no_excess(tmp_path, creation_times):
    make_files(tmp_path, "app.1.log")

    plan = RollingFilePurger(tmp_path, "app.log", 5).plan()

    assert [a.file_name for a in plan.retained] == ["app.1.log"]
    assert plan.excess == []


# ----------------------------
# Filesystem helpers
# ----------------------------


def test_read_creation_time_of_real_file(tmp_path):
    (p,) = make_files(tmp_path, "app.1.log")

    ts = read_creation_time(p)

    assert ts.tzinfo is not None
    assert ts > datetime(2000, 1, 1, tzinfo=timezone.utc)


def test_read_creation_time_missing_file(tmp_path):
    assert read_creation_time(tmp_path / "gone.1.log") == EARLIEST


def test_read_creation_time_permission_denied(tmp_path, monkeypatch):
    (p,) = make_files(tmp_path, "app.1.log")

    def denied(path, *args, **kwargs):
        raise PermissionError("simulated")

    with monkeypatch.context() as m:
        m.setattr(rollpurge.purger.os, "stat", denied)
        ts = read_creation_time(p)

    assert ts == EARLIEST


def test_try_delete(tmp_path):
    (p,) = make_files(tmp_path, "app.1.log")

    assert try_delete(p) is True
    assert not p.exists()
    assert try_delete(p) is False
