import pytest

from pomotrack.errors import ValidationError
from pomotrack.models import TASK_TITLE_LIMIT, Task
from pomotrack.sync import RemoteSync
from pomotrack.tasks import TaskStore


@pytest.fixture
def store(remote):
    return TaskStore(RemoteSync("alice"), remote)


def test_add_task(store, remote):
    task = store.add("  Write report ")
    assert task.title == "Write report"
    assert task.completed is False
    assert task.pomodoros == 0
    assert task.pomodoro_goal == 1
    assert store.tasks == [task]
    assert remote.calls == [("create_task", "alice", task)]


def test_add_task_ids_are_unique(store):
    ids = {store.add(f"Task {i}").id for i in range(20)}
    assert len(ids) == 20


def test_add_blank_title_is_rejected(store, remote):
    with pytest.raises(ValidationError):
        store.add("   ")
    assert store.tasks == []
    assert remote.calls == []


def test_add_too_long_title_is_rejected(store, remote):
    with pytest.raises(ValidationError):
        store.add("x" * (TASK_TITLE_LIMIT + 1))
    assert store.tasks == []
    assert remote.calls == []


def test_insert_renumbers_on_id_clash(store, remote):
    existing = store.add("Stored")
    inserted = store.insert(Task(id=existing.id, title="Draft"))
    assert inserted.id > existing.id
    assert [task.title for task in store.tasks] == ["Stored", "Draft"]
    assert remote.calls[-1] == ("create_task", "alice", inserted)


def test_update_replaces_by_id(store, remote):
    task = store.add("Draft")
    updated = task.model_copy(update={"title": "Final", "completed": True})
    assert store.update(updated) is True
    assert store.get(task.id) == updated
    assert remote.calls[-1] == ("update_task", "alice", updated)


def test_update_unknown_task_is_ignored(store, remote):
    store.add("Draft")
    assert store.update(Task(id=1, title="Ghost")) is False
    assert store.get(1) is None
    assert remote.names() == ["create_task"]


def test_delete(store, remote):
    keep = store.add("Keep")
    drop = store.add("Drop")
    assert store.delete(drop.id) is True
    assert store.tasks == [keep]
    assert remote.calls[-1] == ("delete_task", "alice", drop.id)


def test_delete_missing_is_noop(store, remote):
    assert store.delete(42) is False
    assert remote.calls == []


def test_goal_adjustments(store):
    task = store.add("Read")
    assert store.increment_goal(task.id).pomodoro_goal == 2
    assert store.increment_goal(task.id).pomodoro_goal == 3
    assert store.decrement_goal(task.id).pomodoro_goal == 2


def test_decrement_goal_floor(store, remote):
    task = store.add("Read")
    assert store.decrement_goal(task.id).pomodoro_goal == 1
    assert store.get(task.id).pomodoro_goal == 1
    assert remote.names() == ["create_task"]


def test_toggle_completed_is_independent_of_pomodoros(store):
    task = store.add("Read")
    assert store.toggle_completed(task.id).completed is True
    assert store.get(task.id).pomodoros == 0
    assert store.toggle_completed(task.id).completed is False


def test_increment_pomodoros(store, remote):
    task = store.add("Read")
    updated = store.increment_pomodoros(task.id)
    assert updated.pomodoros == 1
    assert remote.calls[-1] == ("update_task", "alice", updated)


@pytest.mark.parametrize(
    "operation",
    ["increment_goal", "decrement_goal", "toggle_completed", "increment_pomodoros"],
)
def test_operations_on_missing_task_return_none(store, operation):
    assert getattr(store, operation)(99) is None


def test_rename(store):
    task = store.add("Draft")
    assert store.rename(task.id, " Final ").title == "Final"
    with pytest.raises(ValidationError):
        store.rename(task.id, "")
    with pytest.raises(ValidationError):
        store.rename(task.id, "x" * (TASK_TITLE_LIMIT + 1))
    assert store.get(task.id).title == "Final"


def test_sorted_for_display(store):
    a = store.add("A")
    b = store.add("B")
    c = store.add("C")
    store.toggle_completed(b.id)
    assert [task.id for task in store.sorted_for_display()] == [a.id, c.id, b.id]
    assert [task.id for task in store.tasks] == [a.id, b.id, c.id]


def test_in_memory_mode_skips_remote(remote):
    store = TaskStore(RemoteSync(), remote)
    task = store.add("Offline")
    store.toggle_completed(task.id)
    store.delete(task.id)
    assert remote.calls == []


def test_remote_failure_keeps_memory_state(store, remote):
    remote.fail_writes = True
    task = store.add("Flaky")
    store.increment_goal(task.id)
    assert store.get(task.id).pomodoro_goal == 2
    assert remote.names() == ["create_task", "update_task"]


def test_replace_all_and_clear(store):
    tasks = [Task(id=1, title="One"), Task(id=2, title="Two")]
    store.replace_all(tasks)
    assert len(store) == 2
    store.clear()
    assert store.tasks == []
