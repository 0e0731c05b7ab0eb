"""HTTP client for the time-tracking REST API.

Access tokens are kept in the durable key-value store (so a restart stays
logged in); the refresh token is an HTTP-only cookie held by the
requests.Session. A 401 triggers exactly one refresh-and-retry.
"""

from datetime import datetime
import requests
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from tt.common.logger import log
from tt.core.constants import ACCESS_TOKEN_STORAGE_KEY
from tt.api.schemas import (
    AuthResponse,
    Project,
    Report,
    TimeEntry,
    TimeEntryCreate,
    User,
    UserSettings,
    WorkType,
)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):

    def __init__(self, message="Request failed", status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ApiError):

    def __init__(self, message="Unauthorized", status_code=401):
        super().__init__(message, status_code)


def _parse(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.error(f"Malformed {model.__name__} in API response: {e}")
        raise ApiError("Malformed response") from e

def _parse_list(model, items):
    if not isinstance(items, list):
        raise ApiError("Malformed response")
    return [_parse(model, item) for item in items]

def _unwrap(data, key):
    if not isinstance(data, dict) or key not in data:
        log.error(f"API response is missing '{key}'")
        raise ApiError("Malformed response")
    return data[key]

# snake_case keyword updates -> camelCase JSON body. None is kept, it's how the API clears nullable fields.
def _camel_payload(fields):
    payload = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            value = value.isoformat()
        payload[to_camel(key)] = value
    return payload


class ApiClient:

    def __init__(self, base_url, token_store, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token_store = token_store

        self.auth = AuthApi(self)
        self.projects = ProjectsApi(self)
        self.work_types = WorkTypesApi(self)
        self.time_entries = TimeEntriesApi(self)
        self.settings = SettingsApi(self)
        self.reports = ReportsApi(self)

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    #region === Token handling ===

    @property
    def access_token(self):
        return self._token_store.get_item(ACCESS_TOKEN_STORAGE_KEY)

    def set_access_token(self, token):
        self._token_store.set_item(ACCESS_TOKEN_STORAGE_KEY, token)

    def clear_access_token(self):
        self._token_store.remove_item(ACCESS_TOKEN_STORAGE_KEY)

    def _refresh_access_token(self):
        try:
            response = self.session.post(self._url("/auth/refresh"), timeout=self.timeout)
        except requests.RequestException:
            log.warning("Token refresh request failed", exc_info=True)
            return None

        if not response.ok:
            log.info(f"Token refresh rejected with {response.status_code}, clearing stored access token")
            self.clear_access_token()
            return None

        try:
            token = response.json().get("accessToken")
        except (ValueError, AttributeError):
            token = None
        if token:
            self.set_access_token(token)
            log.debug("Access token refreshed")
            return token
        return None

    #endregion === Token handling ===

    @staticmethod
    def _error_message(response, fallback="Request failed"):
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return fallback

    def request(self, method, path, json=None, params=None, headers=None, retry=True):
        request_headers = dict(headers or {})
        token = self.access_token
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method,
                self._url(path),
                json=json,
                params=params,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"{method} {path} failed: {e}")
            raise ApiError("Request failed") from e

        if response.status_code == 401:
            if retry and self._refresh_access_token():
                return self.request(method, path, json=json, params=params, headers=headers, retry=False)
            raise UnauthorizedError(self._error_message(response, "Unauthorized"))

        if not response.ok:
            message = self._error_message(response)
            log.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Malformed response", response.status_code) from e


class _Resource:

    def __init__(self, client):
        self._client = client


class AuthApi(_Resource):

    def _authenticate(self, path, email, password):
        data = self._client.request("POST", path, json={"email": email, "password": password})
        auth = _parse(AuthResponse, data)
        self._client.set_access_token(auth.access_token)
        log.info(f"Authenticated as {auth.user.email}")
        return auth

    def register(self, email, password):
        return self._authenticate("/auth/register", email, password)

    def login(self, email, password):
        return self._authenticate("/auth/login", email, password)

    def logout(self):
        try:
            self._client.request("POST", "/auth/logout")
        finally:
            self._client.clear_access_token()

    def me(self):
        data = self._client.request("GET", "/auth/me", headers={"Cache-Control": "no-store"})
        user = _unwrap(data, "user")
        return _parse(User, user) if user is not None else None


class ProjectsApi(_Resource):

    def list(self):
        return _parse_list(Project, _unwrap(self._client.request("GET", "/projects"), "items"))

    def get(self, project_id):
        return _parse(Project, _unwrap(self._client.request("GET", f"/projects/{project_id}"), "item"))

    def create(self, name, color=None, description=None):
        payload = {"name": name}
        if color is not None:
            payload["color"] = color
        if description is not None:
            payload["description"] = description
        return _parse(Project, _unwrap(self._client.request("POST", "/projects", json=payload), "item"))

    def update(self, project_id, **fields):
        data = self._client.request("PATCH", f"/projects/{project_id}", json=_camel_payload(fields))
        return _parse(Project, _unwrap(data, "item"))

    def delete(self, project_id):
        return bool(_unwrap(self._client.request("DELETE", f"/projects/{project_id}"), "ok"))

    # Points the user's server-side "active project" at this project. Returns the id the server now holds.
    def activate(self, project_id):
        data = self._client.request("POST", f"/projects/{project_id}/activate")
        return str(_unwrap(data, "activeProjectId"))


class WorkTypesApi(_Resource):

    def list(self, project_id):
        data = self._client.request("GET", "/work-types", params={"projectId": project_id})
        return _parse_list(WorkType, _unwrap(data, "items"))

    def create(self, project_id, name, color=None, description=None, time_goal_ms=None):
        optional = {"color": color, "description": description, "time_goal_ms": time_goal_ms}
        payload = _camel_payload({"project_id": project_id, "name": name,
                                  **{k: v for k, v in optional.items() if v is not None}})
        return _parse(WorkType, _unwrap(self._client.request("POST", "/work-types", json=payload), "item"))

    def update(self, work_type_id, **fields):
        data = self._client.request("PATCH", f"/work-types/{work_type_id}", json=_camel_payload(fields))
        return _parse(WorkType, _unwrap(data, "item"))

    def delete(self, work_type_id):
        return bool(_unwrap(self._client.request("DELETE", f"/work-types/{work_type_id}"), "ok"))


class TimeEntriesApi(_Resource):

    def list(self, project_id=None, work_type_id=None, from_=None, to=None, limit=None, include_all=False):
        params = {}
        if project_id:
            params["projectId"] = project_id
        if work_type_id:
            params["workTypeId"] = work_type_id
        if from_:
            params["from"] = from_.isoformat() if isinstance(from_, datetime) else from_
        if to:
            params["to"] = to.isoformat() if isinstance(to, datetime) else to
        if limit:
            params["limit"] = str(limit)
        if include_all:
            params["all"] = "true"
        data = self._client.request("GET", "/time-entries", params=params or None)
        return _parse_list(TimeEntry, _unwrap(data, "items"))

    def today(self):
        return _parse_list(TimeEntry, _unwrap(self._client.request("GET", "/time-entries/today"), "items"))

    def create(self, entry: TimeEntryCreate):
        data = self._client.request("POST", "/time-entries", json=entry.to_payload())
        return _parse(TimeEntry, _unwrap(data, "item"))

    def update(self, entry_id, **fields):
        data = self._client.request("PATCH", f"/time-entries/{entry_id}", json=_camel_payload(fields))
        return _parse(TimeEntry, _unwrap(data, "item"))

    def delete(self, entry_id):
        return bool(_unwrap(self._client.request("DELETE", f"/time-entries/{entry_id}"), "ok"))


class SettingsApi(_Resource):

    def get(self):
        return _parse(UserSettings, _unwrap(self._client.request("GET", "/settings"), "settings"))

    def update(self, settings: UserSettings):
        data = self._client.request("PUT", "/settings", json=settings.to_payload())
        return _parse(UserSettings, _unwrap(data, "settings"))

    # Asks the server to drop entries older than the user's retention period.
    def cleanup(self):
        return bool(_unwrap(self._client.request("POST", "/settings/cleanup"), "ok"))


class ReportsApi(_Resource):

    def get(self, period=None, start_date=None, end_date=None):
        params = {}
        if period:
            params["period"] = period
        if start_date:
            params["startDate"] = start_date.isoformat() if isinstance(start_date, datetime) else start_date
        if end_date:
            params["endDate"] = end_date.isoformat() if isinstance(end_date, datetime) else end_date
        return _parse(Report, self._client.request("GET", "/reports", params=params or None))
