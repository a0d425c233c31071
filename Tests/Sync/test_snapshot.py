# test_snapshot.py
#
#
# Imports
#
# Third-Party Imports
import pytest
#
# Local Imports
from lifti_sync.DB.Change_Tracker import ChangeTracker
from lifti_sync.DB.Lifti_DB import LiftiDB
from lifti_sync.Domain.domain_types import ExerciseTemplate, Plan, WorkoutSession
from lifti_sync.Sync.schemas import BackupSnapshot
from lifti_sync.Sync.snapshot import build_snapshot, build_snapshot_with_pending, write_snapshot
#
#######################################################################################################################
#
# Functions:

@pytest.fixture
def db():
    ticks = iter(range(10_000, 10_000_000, 1000))
    db = LiftiDB(":memory:", clock=lambda: next(ticks))
    yield db
    db.close_connection()


def test_empty_store_builds_empty_snapshot(db):
    snapshot = build_snapshot(db)
    assert snapshot.schema_version == 1
    assert (snapshot.exercises, snapshot.plans, snapshot.sessions) == ([], [], [])


def test_snapshot_contains_all_collections_in_insertion_order(db):
    db.put_exercise(ExerciseTemplate(id="e1", name="Curl", mode="strength_reps"))
    db.put_plan(Plan(id="b", name="B", created_at=0))
    db.put_plan(Plan(id="a", name="A", created_at=0))
    db.put_session(WorkoutSession(id="s1", plan_id="a", name="A", started_at=0))

    snapshot = build_snapshot(db)

    assert [e.id for e in snapshot.exercises] == ["e1"]
    assert [p.id for p in snapshot.plans] == ["b", "a"]
    assert [s.id for s in snapshot.sessions] == ["s1"]


def test_exported_at_comes_from_store_clock(db):
    db.put_plan(Plan(id="p", name="P", created_at=0))
    stamped = db.get_plan("p").updated_at
    assert build_snapshot(db).exported_at > stamped


def test_pending_ops_are_captured_with_snapshot(db):
    db.put_plan(Plan(id="p1", name="P", created_at=0))
    db.delete_session("gone")

    snapshot, pending = build_snapshot_with_pending(db)

    assert set(pending) == {"plan:p1", "session:gone"}
    assert pending["plan:p1"] == snapshot.plans[0].updated_at


def test_write_snapshot_upserts_without_tracking(db):
    db.put_plan(Plan(id="local-only", name="Keep me", created_at=0))
    ChangeTracker(db).clear()
    incoming = BackupSnapshot(
        exported_at=1,
        exercises=[ExerciseTemplate(id="e1", name="Row", mode="strength_reps", updated_at=5)],
        plans=[Plan(id="remote", name="Remote", created_at=0, updated_at=7)],
        sessions=[WorkoutSession(id="s1", plan_id="remote", name="Remote", started_at=3, updated_at=8)],
    )

    write_snapshot(db, incoming)

    assert [p.id for p in db.list_plans()] == ["local-only", "remote"]
    assert db.get_plan("remote").updated_at == 7
    assert db.get_session("s1").updated_at == 8
    assert db.get_exercise("e1").updated_at == 5
    assert ChangeTracker(db).count() == 0


def test_write_snapshot_keeps_local_edits_made_after_capture(db):
    db.put_plan(Plan(id="p1", name="Captured", created_at=0))
    _, pending = build_snapshot_with_pending(db)
    db.put_plan(Plan(id="p1", name="Edited after capture", created_at=0))
    incoming = BackupSnapshot(
        exported_at=1,
        plans=[Plan(id="p1", name="Remote", created_at=0, updated_at=99_999_999)],
        sessions=[WorkoutSession(id="s1", plan_id="p1", name="Remote", started_at=3, updated_at=8)],
    )

    assert write_snapshot(db, incoming, pending) == 1

    assert db.get_plan("p1").name == "Edited after capture"
    assert db.get_session("s1") is not None


def test_write_then_build_reproduces_entities(db):
    incoming = BackupSnapshot(
        exported_at=1,
        plans=[Plan(id="p1", name="One", created_at=0, updated_at=7)],
    )
    write_snapshot(db, incoming)
    rebuilt = build_snapshot(db)
    assert rebuilt.plans == incoming.plans

#
# End of test_snapshot.py
#######################################################################################################################
