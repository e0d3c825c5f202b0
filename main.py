# demo.py
import logging
from datetime import date

import pandas as pd
import matplotlib.pyplot as plt

from weekplan.formula import preview_task_calculation
from weekplan.scheduler import phase_overview, suggest_alternative_slots


def availability_row(user_id, week_start, days, start, end):
    row = {"user_id": user_id, "week_start": week_start}
    for day in ["monday", "tuesday", "wednesday", "thursday",
                "friday", "saturday", "sunday"]:
        row[f"{day}_available"] = day in days
        row[f"{day}_start"] = start
        row[f"{day}_end"] = end
    return row


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    week_start = date(2025, 1, 6)  # Monday

    availability = [
        availability_row("ana", week_start,
                         {"monday", "tuesday", "wednesday", "thursday", "friday"},
                         "09:00", "17:00"),
        availability_row("luis", week_start,
                         {"monday", "tuesday", "wednesday"},
                         "10:00", "14:00"),
    ]

    schedules = [
        {"id": "s1", "user_id": "ana", "scheduled_date": "2025-01-06",
         "scheduled_start": "10:00", "scheduled_end": "11:30"},
        {"id": "s2", "user_id": "luis", "scheduled_date": "2025-01-07",
         "scheduled_start": "12:00", "scheduled_end": "13:00"},
        {"id": "s3", "user_id": "ana", "scheduled_date": "2025-01-08",
         "scheduled_start": "10:00", "scheduled_end": "11:00"},
    ]

    slots = suggest_alternative_slots(
        availability_rows=availability,
        schedule_rows=schedules,
        user_id="ana",
        collaborator_user_id="luis",
        week_start=week_start,
        duration_hours=1,
        exclude_schedule_id="s3",
    )

    print("=== Alternative slots ===")
    print(pd.DataFrame([s.to_dict() for s in slots]))

    tasks = [
        {"id": f"t{i}", "title": f"Task {i}", "phase": 1, "order_index": i}
        for i in range(17)
    ]
    completions = [{"task_id": f"t{i}", "validated_by_leader": True} for i in range(8)]
    overview = phase_overview(tasks, completions)

    print("\n=== Phase overview ===")
    print(f"weeks={overview.total_weeks} current={overview.current_week} "
          f"progress={overview.progress_percent}%")
    for week, week_tasks in overview.tasks_by_week.items():
        print(f"  week {week}: {len(week_tasks)} tasks")

    quota = preview_task_calculation("cto", 3, "lean_startup", 1, 35)
    print("\n=== Weekly quota ===")
    print(f"{quota.formula} = {quota.tasks_per_week}")

    # Plot the suggested slots per day
    df = pd.DataFrame([s.to_dict() | {"start_min": s.start, "end_min": s.end} for s in slots])
    plt.figure(figsize=(10, 3))
    for _, r in df.iterrows():
        plt.barh(r["day_name"], (r["end_min"] - r["start_min"]) / 60,
                 left=r["start_min"] / 60,
                 color="tab:green" if r["is_available"] else "tab:red",
                 alpha=0.5)
    plt.title("Suggested Slots")
    plt.xlabel("Hour of day")
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
