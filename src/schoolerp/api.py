"""HTTP client for the ERP timetable endpoints.

TimetableApi is a thin synchronous wrapper over a requests.Session: it adds the
bearer token, maps HTTP failures onto the errors.py hierarchy and parses every
response into a typed model. AsyncTimetableApi exposes the same operations as
coroutines by running the sync client in a worker thread, so UI-style callers
(the period editor) never block their event loop.
"""

import asyncio
from collections.abc import Callable
from typing import Any

import requests
from pydantic import ValidationError as PydanticValidationError

from src.schoolerp.errors import (
    AuthenticationError,
    ErpApiError,
    NotFoundError,
    PermanentError,
    RateLimitError,
    TransientError,
    ValidationError,
)
from src.schoolerp.logging import get_logger
from src.schoolerp.models import (
    AutoGenerateRequest,
    ClassRef,
    ClassTimetable,
    FreeTeacherList,
    LoginResponse,
    MessageResponse,
    PeriodCreate,
    PeriodLookup,
    PeriodUpdate,
    SubjectList,
    TeacherList,
    TeacherTimetable,
    Weekday,
)

log = get_logger(__name__)

TokenProvider = Callable[[], str | None]

_BAD_URL_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
)


def _server_message(response: requests.Response) -> str | None:
    """Pull the backend's human-readable message out of an error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def classify_response(response: requests.Response) -> ErpApiError | None:
    """Map a non-2xx response onto the error hierarchy (None for success)."""
    status = response.status_code
    if status < 400:
        return None

    message = _server_message(response)
    detail = f"{response.request.method} {response.url} -> {status}"
    if message:
        detail = f"{detail}: {message}"

    if status in (401, 403):
        return AuthenticationError(detail, status_code=status, message=message)
    if status == 404:
        return NotFoundError(detail, status_code=status, message=message)
    if status in (400, 409, 422):
        return ValidationError(detail, status_code=status, message=message)
    if status == 429:
        return RateLimitError(detail, status_code=status, message=message)
    if status >= 500:
        return TransientError(detail, status_code=status, message=message)
    return PermanentError(detail, status_code=status, message=message)


class TimetableApi:
    """Synchronous client for the class/subject/teacher/timetable endpoints.

    Args:
        base_url: API root, e.g. ``http://localhost:4000/api/v1``.
        token_provider: Callable returning the current bearer token or None.
            Without a token, requests go out with no Authorization header.
        timeout: Per-request timeout in seconds.
        session: Optional pre-built requests.Session (tests inject a mock).
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            TransientError: Transport failure (connection, timeout, broken body) or 5xx.
            PermanentError: Any other failure, including a malformed base URL
                and undecodable bodies.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                json=json_body,
                params=params,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            log.warning("api_timeout", method=method, path=path)
            raise TransientError(f"{method} {path} timed out: {e}") from e
        except requests.ConnectionError as e:
            log.warning("api_connection_error", method=method, path=path, error=str(e))
            raise TransientError(f"{method} {path} failed: {e}") from e
        except _BAD_URL_ERRORS as e:
            log.error("api_bad_url", method=method, url=url)
            raise PermanentError(f"{method} {url} is not a valid URL: {e}") from e
        except requests.RequestException as e:
            log.warning("api_transport_error", method=method, path=path, error=str(e))
            raise TransientError(f"{method} {path} failed: {e}") from e

        error = classify_response(response)
        if error is not None:
            log.info(
                "api_error",
                method=method,
                path=path,
                status=response.status_code,
                type=type(error).__name__,
            )
            raise error

        log.debug("api_ok", method=method, path=path, status=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PermanentError(f"{method} {path} returned non-JSON body") from e

    def _parse(self, model: type, payload: Any, path: str) -> Any:
        try:
            return model.model_validate(payload if payload is not None else {})
        except PydanticValidationError as e:
            log.error("api_bad_payload", path=path, model=model.__name__, errors=e.error_count())
            raise PermanentError(f"Unexpected response from {path}: {e}") from e

    # -- reference data -------------------------------------------------

    def list_classes(self, page: int = 1, limit: int = 100) -> list[ClassRef]:
        """GET /class/getall. Accepts a bare list or a {classes}/{data} envelope."""
        path = "/class/getall"
        payload = self._request("GET", path, params={"page": page, "limit": limit})
        if isinstance(payload, dict):
            payload = payload.get("classes") or payload.get("data") or []
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise PermanentError(f"Unexpected response from {path}: expected a list of classes")
        try:
            return [ClassRef.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            raise PermanentError(f"Unexpected response from {path}: {e}") from e

    def subjects_for_class(self, class_id: str) -> SubjectList:
        path = f"/subject/class/{class_id}"
        return self._parse(SubjectList, self._request("GET", path), path)

    def teachers_for_subject(self, subject_id: str) -> TeacherList:
        path = f"/teachers/bySubject/{subject_id}"
        return self._parse(TeacherList, self._request("GET", path), path)

    # -- periods --------------------------------------------------------

    def get_period(self, class_id: str, day: Weekday, period_number: int) -> PeriodLookup:
        """Look up the period at (class, day, period).

        A 404 and a ``{"period": null}`` body are the same outcome: an empty
        PeriodLookup. Any other failure propagates.
        """
        path = f"/timetable/getperiod/{class_id}/{Weekday.parse(day).value}/{period_number}"
        try:
            payload = self._request("GET", path)
        except NotFoundError:
            log.info("period_absent", class_id=class_id, day=Weekday.parse(day).value, period=period_number)
            return PeriodLookup()
        return self._parse(PeriodLookup, payload, path)

    def update_period(self, period_id: str, update: PeriodUpdate) -> MessageResponse:
        path = f"/timetable/update/{period_id}"
        body = update.model_dump(mode="json", by_alias=True)
        return self._parse(MessageResponse, self._request("PUT", path, json_body=body), path)

    def create_period(self, period: PeriodCreate) -> MessageResponse:
        path = "/timetable/period"
        body = period.model_dump(mode="json", by_alias=True, exclude_none=True)
        return self._parse(MessageResponse, self._request("POST", path, json_body=body), path)

    def delete_period(self, period_id: str) -> MessageResponse:
        path = f"/timetable/period/{period_id}"
        return self._parse(MessageResponse, self._request("DELETE", path), path)

    # -- whole timetables -----------------------------------------------

    def auto_generate(self, request: AutoGenerateRequest) -> MessageResponse:
        path = "/timetable/auto-generate"
        body = request.model_dump(mode="json", by_alias=True)
        return self._parse(MessageResponse, self._request("POST", path, json_body=body), path)

    def find_free_teachers(self, day: Weekday, period_number: int) -> FreeTeacherList:
        path = "/timetable/free-teachers"
        body = {"day": Weekday.parse(day).value, "periodNumber": period_number}
        return self._parse(FreeTeacherList, self._request("POST", path, json_body=body), path)

    def class_timetable(self, class_id: str) -> ClassTimetable:
        path = f"/timetable/class/{class_id}"
        return self._parse(ClassTimetable, self._request("GET", path), path)

    def teacher_timetable(self, teacher_id: str) -> TeacherTimetable:
        path = f"/timetable/teacher/{teacher_id}"
        return self._parse(TeacherTimetable, self._request("GET", path), path)

    # -- auth -----------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResponse:
        path = "/register/signin"
        body = {"email": email, "password": password}
        return self._parse(LoginResponse, self._request("POST", path, json_body=body), path)

    def logout(self) -> MessageResponse:
        path = "/register/logout"
        return self._parse(MessageResponse, self._request("POST", path), path)


class AsyncTimetableApi:
    """Coroutine facade over TimetableApi for the period editor."""

    def __init__(self, api: TimetableApi) -> None:
        self.api = api

    async def list_classes(self) -> list[ClassRef]:
        return await asyncio.to_thread(self.api.list_classes)

    async def subjects_for_class(self, class_id: str) -> SubjectList:
        return await asyncio.to_thread(self.api.subjects_for_class, class_id)

    async def teachers_for_subject(self, subject_id: str) -> TeacherList:
        return await asyncio.to_thread(self.api.teachers_for_subject, subject_id)

    async def get_period(self, class_id: str, day: Weekday, period_number: int) -> PeriodLookup:
        return await asyncio.to_thread(self.api.get_period, class_id, day, period_number)

    async def update_period(self, period_id: str, update: PeriodUpdate) -> MessageResponse:
        return await asyncio.to_thread(self.api.update_period, period_id, update)
