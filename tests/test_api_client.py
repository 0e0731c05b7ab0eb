"""Tests for the REST client: auth header, refresh-and-retry, errors and schema validation.

Covers: tt.api.client, tt.api.schemas
"""

import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock
import requests
from fakes import MemoryStore

BASE_URL = "http://api.test/"

_NO_JSON = object()


def _response(status=200, body=None):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 400
    if body is _NO_JSON:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        from tt.api.client import ApiClient
        self.store = MemoryStore()
        self.session = MagicMock()
        self.client = ApiClient(BASE_URL, self.store, session=self.session)

    def set_token(self, token):
        from tt.core.constants import ACCESS_TOKEN_STORAGE_KEY
        self.store.set_item(ACCESS_TOKEN_STORAGE_KEY, token)

    @property
    def token(self):
        from tt.core.constants import ACCESS_TOKEN_STORAGE_KEY
        return self.store.get_item(ACCESS_TOKEN_STORAGE_KEY)


class TestRequest(ApiTestCase):

    def test_bearer_header_and_url(self):
        self.set_token("tok")
        self.session.request.return_value = _response(body={"items": [{"id": "p1", "name": "Alpha",
                                                                       "someNewField": 1}]})
        projects = self.client.projects.list()

        args, kwargs = self.session.request.call_args
        self.assertEqual(args, ("GET", "http://api.test/projects"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok")
        self.assertEqual(kwargs["timeout"], 10)
        self.assertEqual(projects[0].name, "Alpha")
        self.assertEqual(projects[0].status, "active")

    def test_no_token_no_header(self):
        self.session.request.return_value = _response(body={"items": []})
        self.client.projects.list()
        self.assertNotIn("Authorization", self.session.request.call_args.kwargs["headers"])

    def test_401_refreshes_and_retries_once(self):
        self.set_token("old")
        self.session.request.side_effect = [
            _response(401, {"error": "Token expired"}),
            _response(body={"settings": {"pomodoroWorkTime": 50, "activeProjectId": "p9"}}),
        ]
        self.session.post.return_value = _response(body={"accessToken": "new"})

        settings = self.client.settings.get()

        self.assertEqual(settings.pomodoro_work_time, 50)
        self.assertEqual(settings.active_project_id, "p9")
        self.assertEqual(self.token, "new")
        self.assertEqual(self.session.post.call_args.args, ("http://api.test/auth/refresh",))
        retry_headers = self.session.request.call_args_list[1].kwargs["headers"]
        self.assertEqual(retry_headers["Authorization"], "Bearer new")

    def test_failed_refresh_raises_unauthorized_and_clears_token(self):
        from tt.api.client import UnauthorizedError
        self.set_token("old")
        self.session.request.return_value = _response(401, {"error": "Token expired"})
        self.session.post.return_value = _response(401, {"error": "No refresh token"})

        with self.assertRaises(UnauthorizedError) as ctx:
            self.client.projects.list()
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIsNone(self.token)
        self.assertEqual(self.session.request.call_count, 1)

    def test_second_401_is_not_retried_again(self):
        from tt.api.client import UnauthorizedError
        self.session.request.return_value = _response(401, {"error": "Nope"})
        self.session.post.return_value = _response(body={"accessToken": "new"})
        with self.assertRaises(UnauthorizedError):
            self.client.projects.list()
        self.assertEqual(self.session.request.call_count, 2)
        self.assertEqual(self.session.post.call_count, 1)

    def test_error_message_from_body(self):
        from tt.api.client import ApiError
        self.session.request.return_value = _response(500, {"error": "Database unavailable"})
        with self.assertRaises(ApiError) as ctx:
            self.client.projects.get("p1")
        self.assertEqual(ctx.exception.message, "Database unavailable")
        self.assertEqual(ctx.exception.status_code, 500)

    def test_error_without_body_uses_fallback(self):
        from tt.api.client import ApiError
        self.session.request.return_value = _response(502, _NO_JSON)
        with self.assertRaises(ApiError) as ctx:
            self.client.projects.get("p1")
        self.assertEqual(ctx.exception.message, "Request failed")

    def test_transport_errors_are_wrapped(self):
        from tt.api.client import ApiError
        self.session.request.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(ApiError):
            self.client.time_entries.today()

    def test_malformed_responses(self):
        from tt.api.client import ApiError
        self.session.request.return_value = _response(body={"items": [{"name": "no id"}]})
        with self.assertRaises(ApiError) as ctx:
            self.client.projects.list()
        self.assertEqual(ctx.exception.message, "Malformed response")

        self.session.request.return_value = _response(body={"unexpected": True})
        with self.assertRaises(ApiError):
            self.client.projects.list()

        self.session.request.return_value = _response(200, _NO_JSON)
        with self.assertRaises(ApiError):
            self.client.projects.list()


class TestResources(ApiTestCase):

    def test_login_stores_token(self):
        self.session.request.return_value = _response(body={"accessToken": "abc",
                                                            "user": {"id": "u1", "email": "me@example.com"}})
        auth = self.client.auth.login("me@example.com", "secret")
        self.assertEqual(auth.user.email, "me@example.com")
        self.assertEqual(self.token, "abc")
        self.assertEqual(self.session.request.call_args.kwargs["json"],
                         {"email": "me@example.com", "password": "secret"})

    def test_logout_clears_token_even_on_failure(self):
        from tt.api.client import ApiError
        self.set_token("abc")
        self.session.request.return_value = _response(500, {"error": "boom"})
        with self.assertRaises(ApiError):
            self.client.auth.logout()
        self.assertIsNone(self.token)

    def test_me_without_user(self):
        self.session.request.return_value = _response(body={"user": None})
        self.assertIsNone(self.client.auth.me())

    def test_create_time_entry_payload(self):
        from tt.api.schemas import TimeEntryCreate
        start = datetime(2024, 5, 15, 9, 0, tzinfo=timezone.utc)
        end = datetime(2024, 5, 15, 10, 0, tzinfo=timezone.utc)
        self.session.request.return_value = _response(body={"item": {
            "id": "e1", "projectId": "p1", "startTime": "2024-05-15T09:00:00Z",
            "endTime": "2024-05-15T10:00:00Z", "durationMs": 3600000, "workTypeId": None,
        }})

        entry = self.client.time_entries.create(TimeEntryCreate(project_id="p1", start_time=start, end_time=end,
                                                                 duration_ms=3600000))

        payload = self.session.request.call_args.kwargs["json"]
        self.assertEqual(payload["projectId"], "p1")
        self.assertEqual(payload["durationMs"], 3600000)
        self.assertTrue(payload["startTime"].startswith("2024-05-15T09:00:00"))
        self.assertNotIn("description", payload)
        self.assertNotIn("workTypeId", payload)
        self.assertEqual(entry.id, "e1")
        self.assertEqual(entry.duration_ms, 3600000)

    def test_time_entry_create_validates_range(self):
        from pydantic import ValidationError
        from tt.api.schemas import TimeEntryCreate
        start = datetime(2024, 5, 15, 9, 0, tzinfo=timezone.utc)
        with self.assertRaises(ValidationError):
            TimeEntryCreate(project_id="p1", start_time=start, end_time=start, duration_ms=0)
        with self.assertRaises(ValidationError):
            TimeEntryCreate(project_id="p1", start_time=start, end_time=datetime(2024, 5, 15, 10, tzinfo=timezone.utc),
                            duration_ms=-1)

    def test_list_time_entries_params(self):
        self.session.request.return_value = _response(body={"items": []})
        self.client.time_entries.list(project_id="p1", from_=datetime(2024, 5, 1, tzinfo=timezone.utc), limit=50,
                                      include_all=True)
        params = self.session.request.call_args.kwargs["params"]
        self.assertEqual(params["projectId"], "p1")
        self.assertEqual(params["from"], "2024-05-01T00:00:00+00:00")
        self.assertEqual(params["limit"], "50")
        self.assertEqual(params["all"], "true")

    def test_activate_returns_active_id(self):
        self.session.request.return_value = _response(body={"activeProjectId": "p2"})
        self.assertEqual(self.client.projects.activate("p2"), "p2")
        self.assertEqual(self.session.request.call_args.args, ("POST", "http://api.test/projects/p2/activate"))

    def test_update_sends_camel_case(self):
        self.session.request.return_value = _response(body={"item": {"id": "wt1", "projectId": "p1",
                                                                     "name": "Review"}})
        self.client.work_types.update("wt1", name="Review", time_goal_ms=None)
        self.assertEqual(self.session.request.call_args.kwargs["json"], {"name": "Review", "timeGoalMs": None})

    def test_settings_update_round_trip(self):
        from tt.api.schemas import UserSettings
        self.session.request.return_value = _response(body={"settings": {"pomodoroRestTime": 10}})
        saved = self.client.settings.update(UserSettings(pomodoro_rest_time=10))
        self.assertEqual(self.session.request.call_args.kwargs["json"]["pomodoroRestTime"], 10)
        self.assertEqual(saved.pomodoro_rest_time, 10)
        self.assertEqual(saved.pomodoro_work_time, 25)

    def test_report(self):
        self.session.request.return_value = _response(body={
            "startDate": "2024-05-13T00:00:00Z",
            "endDate": "2024-05-19T23:59:59.999Z",
            "totalDuration": 0,
            "entries": [],
            "projectSummaries": [],
        })
        report = self.client.reports.get(period="week")
        self.assertEqual(report.total_duration, 0)
        self.assertEqual(self.session.request.call_args.kwargs["params"], {"period": "week"})


if __name__ == "__main__":
    unittest.main()
