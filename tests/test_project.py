import pytest

from ganttr.exceptions import (
    CircularDependencyError,
    DerivedFieldError,
    InvalidDateError,
    InvalidDateRangeError,
    TaskNotFoundError,
    ValidationError,
)
from ganttr.models import AutoStatus, ExplicitStatus, Status
from ganttr.project import Project


def _project_with_chain() -> Project:
    # 1 depends on 2, 2 depends on 3
    p = Project()
    p.add_task("Pour", "2024-01-01", "2024-01-01")
    p.add_task("Frame", "2024-01-01", "2024-01-01")
    p.add_task("Survey", "2024-01-01", "2024-01-01")
    p.update_task(2, dependencies=[3])
    p.update_task(1, dependencies=[2])
    return p


def test_ids_are_monotonic_and_never_reused():
    p = Project()
    a = p.add_task("A", "2024-01-01", "2024-01-02")
    b = p.add_task("B", "2024-01-01", "2024-01-02")
    assert (a.id, b.id) == (1, 2)
    p.delete_task(2)
    c = p.add_task("C", "2024-01-01", "2024-01-02")
    assert c.id == 3
    assert isinstance(c.status, AutoStatus)


def test_add_task_rejects_bad_input_without_side_effects():
    p = Project()
    with pytest.raises(InvalidDateRangeError):
        p.add_task("Backwards", "2024-01-05", "2024-01-01")
    with pytest.raises(InvalidDateError):
        p.add_task("Garbled", "2024-13-01", "2024-13-02")
    with pytest.raises(ValidationError):
        p.add_task("   ", "2024-01-01", "2024-01-01")
    with pytest.raises(TaskNotFoundError):
        p.add_task("Orphan", "2024-01-01", "2024-01-01", parent_id=9)
    assert p.tasks == {}
    assert p.next_task_id == 1


def test_percent_is_clamped():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-01", percent_complete=150)
    assert t.percent_complete == 100
    p.update_task(t.id, percent_complete=-5)
    assert t.percent_complete == 0


def test_cycle_edit_is_rejected_and_state_kept():
    p = _project_with_chain()
    with pytest.raises(CircularDependencyError):
        p.update_task(3, name="Renamed", dependencies=[1])
    assert p.get(3).dependencies == []
    assert p.get(3).name == "Survey"


def test_dependency_validation():
    p = _project_with_chain()
    with pytest.raises(ValidationError):
        p.update_task(3, dependencies=[3])
    with pytest.raises(TaskNotFoundError):
        p.update_task(3, dependencies=[42])

    child = p.add_task("Rebar", "2024-01-01", "2024-01-01", parent_id=3)
    with pytest.raises(ValidationError, match="own subtask"):
        p.update_task(3, dependencies=[child.id])
    with pytest.raises(ValidationError, match="Subtasks"):
        p.update_task(child.id, dependencies=[2])


def test_invalid_range_edit_is_rejected():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-05")
    with pytest.raises(InvalidDateRangeError):
        p.update_task(t.id, start_date="2024-01-06")
    assert t.start_date == "2024-01-01"


def test_parent_fields_are_derived():
    p = Project()
    parent = p.add_task("Phase", "2024-01-01", "2024-01-01")
    p.add_task("Step", "2024-01-02", "2024-01-04", parent_id=parent.id)
    p.recalculate()
    with pytest.raises(DerivedFieldError):
        p.update_task(parent.id, end_date="2024-02-01")
    with pytest.raises(DerivedFieldError):
        p.update_task(parent.id, percent_complete=50)
    with pytest.raises(DerivedFieldError):
        p.move_task(parent.id, 3)
    # Echoing the current values back is fine
    p.update_task(parent.id, name="Phase 1", start_date=parent.start_date, end_date=parent.end_date)
    assert parent.name == "Phase 1"


def test_status_setting():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-01")
    p.update_task(t.id, status="at_risk")
    assert t.status == ExplicitStatus(Status.AT_RISK)
    p.update_task(t.id, status="auto")
    assert t.status == AutoStatus()


def test_move_and_resize():
    p = Project()
    t = p.add_task("A", "2024-01-10", "2024-01-12")
    p.move_task(t.id, -3)
    assert (t.start_date, t.end_date) == ("2024-01-07", "2024-01-09")
    p.resize_task(t.id, end_delta=2)
    assert t.end_date == "2024-01-11"
    p.resize_task(t.id, start_delta=4)
    assert t.start_date == "2024-01-11"
    with pytest.raises(InvalidDateRangeError):
        p.resize_task(t.id, start_delta=1)
    assert (t.start_date, t.end_date) == ("2024-01-11", "2024-01-11")


def test_resize_both_edges_is_validated_once():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-02")
    # Moving the start alone by 3 would pass the end; together it is valid.
    p.resize_task(t.id, start_delta=3, end_delta=3)
    assert (t.start_date, t.end_date) == ("2024-01-04", "2024-01-05")
    with pytest.raises(InvalidDateRangeError):
        p.resize_task(t.id, start_delta=2, end_delta=-1)
    assert (t.start_date, t.end_date) == ("2024-01-04", "2024-01-05")


def test_dates_are_stored_zero_padded():
    p = Project()
    t = p.add_task("A", "2024-1-5", "2024-1-7")
    assert (t.start_date, t.end_date) == ("2024-01-05", "2024-01-07")
    assert t.to_dict()["start_date"] == "2024-01-05"
    p.update_task(t.id, end_date="2024-1-9")
    assert t.end_date == "2024-01-09"


def test_parent_accepts_its_own_dates_in_another_spelling():
    p = Project()
    parent = p.add_task("Phase", "2024-01-05", "2024-01-07")
    p.add_task("Step", "2024-01-05", "2024-01-07", parent_id=parent.id)
    p.update_task(parent.id, name="Phase 1", start_date="2024-1-5", end_date="2024-1-7")
    assert parent.name == "Phase 1"
    assert (parent.start_date, parent.end_date) == ("2024-01-05", "2024-01-07")


def test_add_and_update_strip_description_and_notes():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-01", description="  Draft  ", notes=" n \n")
    assert (t.description, t.notes) == ("Draft", "n")
    p.update_task(t.id, description=" Final ", notes="  m ")
    assert (t.description, t.notes) == ("Final", "m")


def test_delete_cascades_and_strips_dependencies():
    p = Project()
    p.add_task("Phase", "2024-01-01", "2024-01-01")  # 1
    p.add_task("Step 1", "2024-01-01", "2024-01-01", parent_id=1)  # 2
    p.add_task("Step 2", "2024-01-01", "2024-01-01", parent_id=1)  # 3
    p.add_task("Sub-step", "2024-01-01", "2024-01-01", parent_id=3)  # 4
    p.add_task("Review", "2024-01-01", "2024-01-01", dependencies=[1])  # 5
    p.add_task("Ship", "2024-01-01", "2024-01-01", dependencies=[5])  # 6
    p.get(6).dependencies.append(4)  # as if loaded from an older file

    removed = p.delete_task(1)

    assert removed == [1, 2, 3, 4]
    assert sorted(p.tasks) == [5, 6]
    assert p.get(5).dependencies == []
    assert p.get(6).dependencies == [5]
    with pytest.raises(TaskNotFoundError):
        p.delete_task(1)


def test_add_subtasks_uses_parent_start():
    p = Project()
    parent = p.add_task("Fit-out", "2024-03-01", "2024-03-05")
    created = p.add_subtasks(parent.id, ["Paint", "  ", "Floors"])
    assert [t.name for t in created] == ["Paint", "Floors"]
    assert all((t.start_date, t.end_date) == ("2024-03-01", "2024-03-01") for t in created)
    with pytest.raises(ValidationError):
        p.add_subtasks(parent.id, ["", " "])

    p.recalculate()
    assert (parent.start_date, parent.end_date, parent.percent_complete) == (
        "2024-03-01",
        "2024-03-01",
        0,
    )


def test_recalculate_schedules_then_rolls_up():
    p = Project()
    p.add_task("Permit", "2024-01-01", "2024-01-10")  # 1
    p.add_task("Build", "2024-01-01", "2024-01-01")  # 2
    p.add_task("Walls", "2024-01-01", "2024-01-03", parent_id=2)  # 3
    p.add_task("Inspection", "2024-01-02", "2024-01-02", dependencies=[1])  # 4

    report = p.recalculate()

    assert [s.task_id for s in report.shifts] == [4]
    assert p.get(4).start_date == "2024-01-11"
    assert (p.get(2).start_date, p.get(2).end_date) == ("2024-01-01", "2024-01-03")
    assert p.recalculate().shifts == []


def test_walk_is_outline_order():
    p = Project()
    p.add_task("A", "2024-01-01", "2024-01-01")  # 1
    p.add_task("B", "2024-01-01", "2024-01-01")  # 2
    p.add_task("A.1", "2024-01-01", "2024-01-01", parent_id=1)  # 3
    p.add_task("A.1.a", "2024-01-01", "2024-01-01", parent_id=3)  # 4
    p.add_task("A.2", "2024-01-01", "2024-01-01", parent_id=1)  # 5
    assert [(t.name, depth) for t, depth in p.walk()] == [
        ("A", 0),
        ("A.1", 1),
        ("A.1.a", 2),
        ("A.2", 1),
        ("B", 0),
    ]


def test_baseline_is_a_snapshot():
    p = Project()
    t = p.add_task("A", "2024-01-01", "2024-01-02")
    p.set_baseline()
    p.move_task(t.id, 5)
    assert p.baseline[t.id].start_date == "2024-01-01"
