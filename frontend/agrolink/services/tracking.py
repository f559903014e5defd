"""Read-only harvest schedule tracking for farmers.

Cancelled or abandoned harvests are hidden; the rest can be narrowed by
schedule status and a case-insensitive search over crop and farmer name.
"""

from enum import Enum
from typing import Iterable

from agrolink.schemas.harvest import HarvestRecord
from agrolink.schemas.schedule import ScheduleStatus


class ScheduleFilter(str, Enum):
    ALL = "All"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    DRAFT = "Draft"


FILTER_STATUSES: dict[ScheduleFilter, set[ScheduleStatus]] = {
    ScheduleFilter.ONGOING: {ScheduleStatus.PUBLISHED, ScheduleStatus.IN_PROGRESS},
    ScheduleFilter.COMPLETED: {ScheduleStatus.COMPLETED},
    ScheduleFilter.DRAFT: {ScheduleStatus.DRAFT},
}


def is_active(record: HarvestRecord) -> bool:
    if record.status == "CANCELLED":
        return False
    schedule = record.harvest_schedule
    return not (schedule and schedule.schedule_status == ScheduleStatus.CANCELLED)


def matches_filter(record: HarvestRecord, schedule_filter: ScheduleFilter) -> bool:
    if schedule_filter == ScheduleFilter.ALL:
        return True
    schedule = record.harvest_schedule
    return schedule is not None and schedule.schedule_status in FILTER_STATUSES[schedule_filter]


def matches_search(record: HarvestRecord, search: str) -> bool:
    term = search.strip().lower()
    if not term:
        return True
    return term in (record.crop or "").lower() or term in (record.farmer_name or "").lower()


def filter_schedules(
    records: Iterable[HarvestRecord],
    schedule_filter: ScheduleFilter = ScheduleFilter.ALL,
    search: str = "",
) -> list[HarvestRecord]:
    return [
        record
        for record in records
        if is_active(record)
        and matches_filter(record, schedule_filter)
        and matches_search(record, search)
    ]
