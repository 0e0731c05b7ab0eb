import requests
from pydantic import ValidationError
from tt.api.client import ApiError
from tt.api.schemas import TimeEntryCreate
from tt.common.logger import log
from tt.core.constants import MIN_ENTRY_DURATION_MS
from tt.util.misc import datetime_to_ms, ms_to_datetime, now_ms


class EntryValidationError(ValueError):
    pass


# Turns finished timer segments into time entries on the server. Every failure here is logged and reported as a None
# return, never raised, so a flaky network can't break the timer that called us. There is no automatic retry, the
# user's next pause/finish is the retry.
class EntryRecorder:

    def __init__(self, api, notifier, test_mode=False, clock=None):
        self._api = api
        self._notifier = notifier
        self.test_mode = test_mode
        self._clock = clock or now_ms
        self._daily_total = 0

    @property
    def daily_total(self):
        return self._daily_total

    def record(self, project_id, project_name, work_type_id, start_time, end_time, duration, finishing=False,
               time_limit=None):
        """Submit one segment as a time entry.

        start_time and end_time are epoch ms and duration is ms. Segments
        shorter than a minute are skipped (unless in test mode). So are
        segments whose start is not before their end. When finishing, a
        successful save also refreshes the daily total and plays the
        "work complete" notification.

        Returns the created TimeEntry, or None if nothing was saved.
        """
        if duration < MIN_ENTRY_DURATION_MS and not self.test_mode:
            log.info(f"Skipping short segment for project '{project_id}': {duration}ms")
            return None

        if start_time >= end_time:
            log.error(f"Invalid segment interval for project '{project_id}': start {start_time} >= end {end_time}")
            return None

        try:
            payload = TimeEntryCreate(
                project_id=project_id,
                work_type_id=work_type_id,
                start_time=ms_to_datetime(start_time),
                end_time=ms_to_datetime(end_time),
                duration_ms=duration,
                time_limit_ms=time_limit,
            )
        except ValidationError:
            log.error(f"Refusing to submit invalid time entry for project '{project_id}'", exc_info=True)
            return None

        try:
            entry = self._api.time_entries.create(payload)
        except (ApiError, requests.RequestException) as e:
            log.error(f"Error saving time entry for project '{project_id}': {e}")
            return None

        log.info(f"Recorded {duration}ms for project '{project_id}' as entry '{entry.id}'")
        if finishing:
            self.refresh_daily_total()
            self._notifier.notify_work_complete(project_name)
        return entry

    # Sums today's entries from the server. On failure the last known total is kept.
    def refresh_daily_total(self):
        try:
            entries = self._api.time_entries.today()
        except (ApiError, requests.RequestException) as e:
            log.error(f"Error loading today's time entries: {e}")
            return self._daily_total
        self._daily_total = sum(entry.duration_ms for entry in entries)
        log.debug(f"Daily total is now {self._daily_total}ms")
        return self._daily_total

    def record_manual_entry(self, project_id, start, end, work_type_id=None, description=None):
        """Validate and submit a hand-entered entry (start/end are datetimes).

        Bad input raises EntryValidationError before anything is sent. API
        failures propagate as ApiError so the form can show them.
        """
        start_ms = datetime_to_ms(start)
        end_ms = datetime_to_ms(end)
        if end_ms <= start_ms:
            raise EntryValidationError("End time must be after start time")
        if end_ms > self._clock():
            raise EntryValidationError("End time cannot be in the future")
        duration = end_ms - start_ms
        if duration < MIN_ENTRY_DURATION_MS and not self.test_mode:
            raise EntryValidationError("Entries must be at least one minute long")

        payload = TimeEntryCreate(
            project_id=project_id,
            work_type_id=work_type_id,
            start_time=ms_to_datetime(start_ms),
            end_time=ms_to_datetime(end_ms),
            duration_ms=duration,
            description=description or None,
        )
        entry = self._api.time_entries.create(payload)
        log.info(f"Recorded manual entry '{entry.id}' ({duration}ms) for project '{project_id}'")
        self.refresh_daily_total()
        return entry
