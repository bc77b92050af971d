import datetime

from checkkit.services.instance_service import materialize_day, update_instance
from checkkit.services.report_service import build_completion_report, get_pending_deadlines
from checkkit.services.routine_service import delete_routine


def test_completion_report_totals_and_rates(db, make_routine):
    water = make_routine("Water")
    gym = make_routine("Gym", repeat_pattern="weekly", repeat_days=[1])
    for day in (1, 2, 3):
        materialize_day(db, datetime.date(2024, 1, day))

    instances = materialize_day(db, datetime.date(2024, 1, 4))
    update_instance(db, instances[0].id, {"completed": True})

    report = build_completion_report(db, "2024-01-01", "2024-01-05")

    assert report["total"] == 5
    assert report["completed"] == 1
    assert report["completion_rate"] == 20
    assert [row["date"] for row in report["daily_stats"]] == [
        "2024-01-01",
        "2024-01-02",
        "2024-01-03",
        "2024-01-04",
        "2024-01-05",
    ]
    assert report["daily_stats"][3] == {"date": "2024-01-04", "total": 1, "completed": 1, "rate": 100}
    assert report["daily_stats"][4]["total"] == 0
    assert [row["routine"]["id"] for row in report["routine_stats"]] == [water, gym]
    assert report["routine_stats"][0]["rate"] == 25
    assert report["routine_stats"][1]["rate"] == 0


def test_report_includes_history_of_deactivated_routines(db, make_routine):
    routine_id = make_routine("Old habit")
    instance = materialize_day(db, "2024-01-01")[0]
    update_instance(db, instance.id, {"completed": True})
    delete_routine(db, routine_id)

    report = build_completion_report(db, "2024-01-01", "2024-01-01")

    assert report["routine_stats"][0]["routine"]["is_active"] is False
    assert report["completion_rate"] == 100


def test_pending_deadlines_sorted_and_filtered(db, make_routine):
    late = make_routine("Late", deadline="22:00")
    early = make_routine("Early", deadline="06:30")
    make_routine("No deadline")
    done = make_routine("Done", deadline="12:00")
    instances = {i.routine_id: i for i in materialize_day(db, "2024-01-01")}
    update_instance(db, instances[done].id, {"completed": True})

    pending = get_pending_deadlines(db, "2024-01-01")

    assert [item["routine_id"] for item in pending] == [early, late]
    assert pending[0]["deadline"] == "06:30"
    assert pending[0]["instance_id"] == instances[early].id
