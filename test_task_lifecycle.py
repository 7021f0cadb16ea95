# test_task_lifecycle.py

import threading
from datetime import timedelta

import pytest

from mentorship.errors import ConflictError, NotFound, ValidationError
from mentorship.models import Task, TaskStatus, User, utcnow
from mentorship.utils.locks import KeyedLock


def _assigned_ids(db, user_id):
    db.expire_all()
    user = db.query(User).filter(User.user_id == user_id).one()
    return [task.id for task in user.assigned_tasks]


def _done_ids(db, user_id):
    db.expire_all()
    user = db.query(User).filter(User.user_id == user_id).one()
    return [task.id for task in user.done_tasks]


# ---------------------------------------------------------------------------
# Status encoding
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("not_started", TaskStatus.NOT_STARTED),
        ("pending", TaskStatus.PENDING),
        ("completed", TaskStatus.COMPLETED),
        ("COMPLETED", TaskStatus.COMPLETED),
        (True, TaskStatus.COMPLETED),
        ("true", TaskStatus.COMPLETED),
        (None, TaskStatus.NOT_STARTED),
        ("null", TaskStatus.NOT_STARTED),
        (TaskStatus.PENDING, TaskStatus.PENDING),
    ],
)
def test_from_legacy_maps_known_encodings(raw, expected):
    assert TaskStatus.from_legacy(raw) is expected


@pytest.mark.parametrize("raw", [False, "false", "done", 1])
def test_from_legacy_rejects_ambiguous_values(raw):
    with pytest.raises(ValidationError):
        TaskStatus.from_legacy(raw)


# ---------------------------------------------------------------------------
# Create / assign
# ---------------------------------------------------------------------------

def test_create_task_appends_to_assigned_in_order(service, make_user, db):
    make_user("u1")

    first = service.create_task("u1", "Landing page", "Build it", {"MDN": "https://developer.mozilla.org"})
    second = service.create_task("u1", "REST API")

    assert first.status is TaskStatus.NOT_STARTED
    assert first.submission is None
    assert first.resources == {"MDN": "https://developer.mozilla.org"}
    assert first.curriculum_problem_id == 0
    assert _assigned_ids(db, "u1") == [first.id, second.id]


def test_create_task_for_unknown_owner_leaves_no_task(service, db):
    with pytest.raises(NotFound):
        service.create_task("ghost", "Orphan")

    assert db.query(Task).count() == 0


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------

def test_submit_without_file_fails_and_leaves_task_unchanged(service, make_user, db):
    make_user("u1")
    task = service.create_task("u1", "Landing page")

    with pytest.raises(ValidationError):
        service.submit_task(task.id, "u1", None, file_name="page.zip")
    with pytest.raises(ValidationError):
        service.submit_task(task.id, "u1", b"", file_name="page.zip")

    reloaded = service.get_task(task.id)
    assert reloaded.status is TaskStatus.NOT_STARTED
    assert reloaded.submission is None
    assert _assigned_ids(db, "u1") == [task.id]


def test_submit_stores_blob_and_moves_reference_to_done(service, make_user, blob_store, db):
    make_user("u1")
    task = service.create_task("u1", "Landing page")

    submitted = service.submit_task(
        task.id, "u1", b"zip-bytes",
        file_name="page.zip", content_type="application/zip",
        link="https://github.com/u1/page", remarks="first try",
    )

    assert submitted.status is TaskStatus.PENDING
    submission = submitted.submission
    assert submission is not None
    assert submission.file_name == "page.zip"
    assert submission.submitted_by == "u1"
    assert submission.link == "https://github.com/u1/page"
    assert submission.remarks == "first try"
    assert blob_store.get(submission.blob_id) == (b"zip-bytes", "application/zip")

    assert _assigned_ids(db, "u1") == []
    assert _done_ids(db, "u1") == [task.id]


def test_submit_unknown_task_or_user(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page")

    with pytest.raises(NotFound):
        service.submit_task(9999, "u1", b"data", file_name="a.txt")
    with pytest.raises(NotFound):
        service.submit_task(task.id, "ghost", b"data", file_name="a.txt")


def test_submit_by_other_user_only_allowed_for_global_tasks(service, make_user, db):
    make_user("u1")
    make_user("u2")
    private = service.create_task("u1", "Private")
    shared = service.create_task("u1", "Shared", is_global=True)

    with pytest.raises(ValidationError):
        service.submit_task(private.id, "u2", b"data", file_name="a.txt")

    service.submit_task(shared.id, "u2", b"data", file_name="a.txt")
    assert _done_ids(db, "u2") == [shared.id]


def test_second_submission_conflicts(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    service.submit_task(task.id, "u1", b"v1", file_name="a.txt")

    with pytest.raises(ConflictError):
        service.submit_task(task.id, "u1", b"v2", file_name="a.txt")

    service.verify_task(task.id)
    with pytest.raises(ConflictError):
        service.submit_task(task.id, "u1", b"v3", file_name="a.txt")


def test_oversized_file_is_rejected(service, make_user, blob_store):
    make_user("u1")
    task = service.create_task("u1", "Landing page")

    with pytest.raises(ValidationError):
        service.submit_task(task.id, "u1", b"x" * (blob_store.max_file_size + 1), file_name="big.bin")


def test_resubmission_after_timeout_replaces_stale_blob(service, make_user, blob_store, db):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    first = service.submit_task(task.id, "u1", b"old", file_name="a.txt").submission

    # What the pending timeout leaves behind: not_started with the old submission
    row = db.get(Task, task.id)
    row.status = TaskStatus.NOT_STARTED
    db.commit()

    second = service.submit_task(task.id, "u1", b"new", file_name="b.txt").submission

    assert second.blob_id != first.blob_id
    assert not blob_store.exists(first.blob_id)
    assert blob_store.get(second.blob_id)[0] == b"new"


# ---------------------------------------------------------------------------
# Verify / reject / status endpoint semantics
# ---------------------------------------------------------------------------

def test_verify_is_idempotent(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    service.submit_task(task.id, "u1", b"data", file_name="a.txt")

    once = service.verify_task(task.id)
    snapshot = (once.status, once.submission, once.updated_at)
    twice = service.verify_task(task.id)

    assert twice.status is TaskStatus.COMPLETED
    assert (twice.status, twice.submission, twice.updated_at) == snapshot


def test_reject_clears_submission_and_deletes_blob(service, make_user, blob_store):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    blob_id = service.submit_task(task.id, "u1", b"data", file_name="a.txt").submission.blob_id

    rejected = service.reject_task(task.id)

    assert rejected.status is TaskStatus.NOT_STARTED
    assert rejected.submission is None
    assert not blob_store.exists(blob_id)


def test_set_status_accepts_legacy_values(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    service.submit_task(task.id, "u1", b"data", file_name="a.txt")

    assert service.set_status(task.id, True).status is TaskStatus.COMPLETED
    assert service.set_status(task.id, None).status is TaskStatus.NOT_STARTED

    with pytest.raises(ValidationError):
        service.set_status(task.id, "pending")
    with pytest.raises(ValidationError):
        service.set_status(task.id, False)


def test_update_task_edits_only_given_fields(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page", "old", {"a": "https://a"})

    updated = service.update_task(task.id, description="new", resources={"b": "https://b"})

    assert updated.title == "Landing page"
    assert updated.description == "new"
    assert updated.resources == {"b": "https://b"}

    with pytest.raises(ValidationError):
        service.update_task(task.id, status="completed")


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def test_delete_task_cascades_to_user_and_blob(service, make_user, blob_store, db):
    make_user("u1")
    keep = service.create_task("u1", "Keep")
    task = service.create_task("u1", "Landing page")
    blob_id = service.submit_task(task.id, "u1", b"data", file_name="a.txt").submission.blob_id

    service.delete_task(task.id)

    with pytest.raises(NotFound):
        service.get_task(task.id)
    assert _assigned_ids(db, "u1") == [keep.id]
    assert _done_ids(db, "u1") == []
    assert not blob_store.exists(blob_id)


def test_delete_task_survives_missing_blob(service, make_user, blob_store):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    blob_id = service.submit_task(task.id, "u1", b"data", file_name="a.txt").submission.blob_id
    blob_store.delete(blob_id)

    service.delete_task(task.id)

    with pytest.raises(NotFound):
        service.get_task(task.id)


def test_delete_unknown_task(service):
    with pytest.raises(NotFound):
        service.delete_task(12345)


def test_delete_all_tasks_uses_the_same_cascade(service, make_user, blob_store, db):
    make_user("u1")
    make_user("u2")
    a = service.create_task("u1", "A")
    service.create_task("u2", "B")
    blob_id = service.submit_task(a.id, "u1", b"data", file_name="a.txt").submission.blob_id

    assert service.delete_all_tasks() == 2

    assert db.query(Task).count() == 0
    assert _assigned_ids(db, "u1") == [] and _done_ids(db, "u1") == []
    assert _assigned_ids(db, "u2") == []
    assert not blob_store.exists(blob_id)


def test_delete_user_removes_owned_tasks_and_files(service, make_user, blob_store, db):
    make_user("u1")
    make_user("u2")
    task = service.create_task("u1", "Landing page")
    other = service.create_task("u2", "Other")
    blob_id = service.submit_task(task.id, "u1", b"data", file_name="a.txt").submission.blob_id

    service.delete_user("u1")

    assert db.query(User).filter(User.user_id == "u1").first() is None
    assert [t.id for t in db.query(Task).all()] == [other.id]
    assert not blob_store.exists(blob_id)


def test_submission_timestamp_override(service, make_user):
    make_user("u1")
    task = service.create_task("u1", "Landing page")
    when = utcnow() - timedelta(days=3)

    submitted = service.submit_task(task.id, "u1", b"data", file_name="a.txt", now=when)

    assert submitted.submission.submitted_at == when


# ---------------------------------------------------------------------------
# Per-task locking
# ---------------------------------------------------------------------------

def test_keyed_lock_serialises_same_key_and_cleans_up():
    locks = KeyedLock()
    order = []

    def worker():
        with locks.hold(7):
            order.append("worker")

    with locks.hold(7):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join(timeout=0.2)
        assert thread.is_alive()
        with locks.hold(7):
            order.append("reentrant")
        order.append("owner")

    thread.join(timeout=2)
    assert order == ["reentrant", "owner", "worker"]
    assert len(locks) == 0
