"""Period reports: date ranges plus per-project / per-work-type breakdowns.

The server builds the same report (ReportService.get_report). summarize_entries
builds it locally from a list of entries, which is what the desktop uses for
its today/week summaries without another round trip.
"""

import calendar
from datetime import datetime, time, timedelta
from tt.api.schemas import ProjectSummary, Report, SummaryRef, WorkTypeSummary
from tt.common.logger import log

PERIODS = ("week", "month", "quarter", "custom")

UNCATEGORIZED = SummaryRef(id="uncategorized", name="Uncategorized", color="#9ca3af")
_UNKNOWN_PROJECT_COLOR = "#6366f1"


def _day_start(day, tzinfo):
    return datetime.combine(day, time.min, tzinfo=tzinfo)

def _day_end(day, tzinfo):
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=tzinfo)

def _week_range(now):
    monday = now.date() - timedelta(days=now.weekday())
    return _day_start(monday, now.tzinfo), _day_end(monday + timedelta(days=6), now.tzinfo)

def date_range(period, now=None, start=None, end=None):
    """Return (start, end) datetimes for a report period.

    Weeks run Monday 00:00 to Sunday 23:59:59.999. Months and quarters are
    calendar ones containing `now`. A custom period needs both bounds and falls
    back to the current week without them.
    """
    now = now or datetime.now().astimezone()
    if period not in PERIODS:
        raise ValueError(f"Unknown report period '{period}'")

    if period == "week":
        return _week_range(now)

    if period == "month":
        last_day = calendar.monthrange(now.year, now.month)[1]
        return (_day_start(now.date().replace(day=1), now.tzinfo),
                _day_end(now.date().replace(day=last_day), now.tzinfo))

    if period == "quarter":
        first_month = (now.month - 1) // 3 * 3 + 1
        last_month = first_month + 2
        last_day = calendar.monthrange(now.year, last_month)[1]
        return (_day_start(now.date().replace(month=first_month, day=1), now.tzinfo),
                _day_end(now.date().replace(month=last_month, day=last_day), now.tzinfo))

    if start is not None and end is not None:
        return start, end
    log.debug("Custom report period without both bounds, using the current week")
    return _week_range(now)


# Integer percentage rounded half-up, so 12.5% -> 13 like the web client shows it.
def percentage(part, total):
    if not total:
        return 0
    return (200 * part + total) // (2 * total)


def summarize_entries(entries, start, end, projects=None):
    """Group entries by project, then by work type, into a Report.

    `projects` optionally maps project id -> Project for entries that don't
    carry their project inline. Groups keep the order entries first appear in.
    """
    projects = projects or {}
    total = 0
    groups = {}

    for entry in entries:
        total += entry.duration_ms

        group = groups.get(entry.project_id)
        if group is None:
            project = entry.project or projects.get(entry.project_id)
            if project is not None:
                ref = SummaryRef(id=project.id, name=project.name, color=project.color)
            else:
                ref = SummaryRef(id=entry.project_id, name=entry.project_id, color=_UNKNOWN_PROJECT_COLOR)
            group = groups[entry.project_id] = {"project": ref, "total": 0, "count": 0, "work_types": {}}
        group["total"] += entry.duration_ms
        group["count"] += 1

        key = entry.work_type_id or UNCATEGORIZED.id
        bucket = group["work_types"].get(key)
        if bucket is None:
            if entry.work_type is not None:
                ref = SummaryRef(id=entry.work_type.id, name=entry.work_type.name, color=entry.work_type.color)
            elif entry.work_type_id:
                ref = SummaryRef(id=entry.work_type_id, name=entry.work_type_id, color=UNCATEGORIZED.color)
            else:
                ref = UNCATEGORIZED
            bucket = group["work_types"][key] = {"work_type": ref, "duration": 0, "count": 0}
        bucket["duration"] += entry.duration_ms
        bucket["count"] += 1

    summaries = []
    for group in groups.values():
        work_types = [
            WorkTypeSummary(
                work_type=bucket["work_type"],
                duration=bucket["duration"],
                percentage=percentage(bucket["duration"], group["total"]),
                entries_count=bucket["count"],
            )
            for bucket in group["work_types"].values()
        ]
        summaries.append(ProjectSummary(
            project=group["project"],
            total_duration=group["total"],
            percentage=percentage(group["total"], total),
            work_types=work_types,
            entries_count=group["count"],
        ))

    return Report(start_date=start, end_date=end, total_duration=total, entries=list(entries),
                  project_summaries=summaries)


class ReportService:

    def __init__(self, api):
        self._api = api

    def get_report(self, period="week", start_date=None, end_date=None):
        if period not in PERIODS:
            raise ValueError(f"Unknown report period '{period}'")
        report = self._api.reports.get(period=period, start_date=start_date, end_date=end_date)
        log.info(f"Loaded {period} report: {len(report.entries)} entries, {report.total_duration}ms")
        return report

    # Same breakdown built from /time-entries, for when the server-side report isn't wanted.
    def build_local_report(self, period="week", now=None, start_date=None, end_date=None):
        start, end = date_range(period, now, start_date, end_date)
        entries = self._api.time_entries.list(from_=start, to=end, include_all=True)
        return summarize_entries(entries, start, end)
