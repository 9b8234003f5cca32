import json

from ganttr import mcp_server


def test_tools_drive_the_engine(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    assert mcp_server.add_task("Design", "2024-01-01", "2024-01-10") == "Added 'Design' as 1"
    result = mcp_server.add_task("Build", "2024-01-05", "2024-01-06", dependencies=[1])
    assert "Rescheduled: 2 (2024-01-11 -> 2024-01-12)" in result

    task = json.loads(mcp_server.get_task(2))
    assert task["start_date"] == "2024-01-11"
    assert task["blocks"] == []
    assert json.loads(mcp_server.get_task(1))["blocks"] == [2]

    assert mcp_server.update_task(1, dependencies=[2]).startswith("Error:")
    assert mcp_server.get_task(42) == "Error: Task 42 not found"


def test_subtasks_and_listing(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    mcp_server.add_task("Fit-out", "2024-03-01", "2024-03-05")
    mcp_server.add_subtasks(1, ["Paint", "Floors"])
    mcp_server.update_task(3, end_date="2024-03-04", percent_complete=100)

    rows = json.loads(mcp_server.list_tasks())
    assert [(r["name"], r["depth"]) for r in rows] == [("Fit-out", 0), ("Paint", 1), ("Floors", 1)]
    parent = rows[0]
    assert parent["is_parent"] is True
    assert (parent["start_date"], parent["end_date"]) == ("2024-03-01", "2024-03-04")
    # Paint: 1 day at 0%, Floors: 4 days at 100%
    assert parent["percent_complete"] == 80

    assert mcp_server.update_task(1, percent_complete=10).startswith("Error:")
    assert mcp_server.delete_task(1) == "Deleted 1, 2, 3."


def test_baseline_and_variance(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    assert mcp_server.get_variance().startswith("No baseline")
    mcp_server.add_task("A", "2024-01-10", "2024-01-12")
    assert mcp_server.set_baseline() == "Baseline set for 1 task(s)."
    mcp_server.move_task(1, 2)
    rows = json.loads(mcp_server.get_variance())
    assert rows == [{"id": 1, "name": "A", "start_slip": 2, "end_slip": 2}]

    report = json.loads(mcp_server.get_report())
    assert report["milestones"] == []
