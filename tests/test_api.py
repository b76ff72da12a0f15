"""
Unit Tests: TimetableApi

Test coverage:
1. Authorization header handling
2. Response parsing into typed envelopes
3. HTTP / transport failure classification
"""

import asyncio
import unittest
from unittest import mock

import requests

from src.schoolerp.api import AsyncTimetableApi, TimetableApi, classify_response
from src.schoolerp.errors import (
    AuthenticationError,
    NotFoundError,
    PermanentError,
    RateLimitError,
    TransientError,
    ValidationError,
)
from src.schoolerp.models import AutoGenerateRequest, PeriodCreate, PeriodUpdate, Weekday
from tests.fakes import BASE_URL as BASE
from tests.fakes import make_response


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.session = mock.Mock(spec=requests.Session)
        self.token = "tok-123"
        self.api = TimetableApi(BASE, token_provider=lambda: self.token, timeout=5, session=self.session)

    def respond(self, status=200, body=None, **kwargs):
        self.session.request.return_value = make_response(status, body, **kwargs)

    def last_call(self):
        args, kwargs = self.session.request.call_args
        return args, kwargs


class TestRequests(ApiTestCase):
    def test_bearer_token_attached(self):
        self.respond(body={"subjects": []})

        self.api.subjects_for_class("10-A")

        args, kwargs = self.last_call()
        self.assertEqual(args, ("GET", f"{BASE}/subject/class/10-A"))
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer tok-123")
        self.assertEqual(kwargs["timeout"], 5)

    def test_no_token_means_no_authorization_header(self):
        self.token = None
        self.respond(body={"teachers": []})

        self.api.teachers_for_subject("math")

        _, kwargs = self.last_call()
        self.assertNotIn("Authorization", kwargs["headers"])

    def test_list_classes_accepts_envelopes(self):
        item = {"_id": "c1", "grade": 10, "section": "A"}
        for body in ([item], {"classes": [item]}, {"data": [item]}):
            with self.subTest(body=body):
                self.respond(body=body)

                classes = self.api.list_classes()

                self.assertEqual(len(classes), 1)
                self.assertEqual(classes[0].id, "c1")
                self.assertEqual(classes[0].label, "10 - A")

    def test_null_lists_are_empty(self):
        self.respond(body={"success": True, "subjects": None})

        self.assertEqual(self.api.subjects_for_class("c1").subjects, [])

    def test_get_period_parses_populated_refs(self):
        self.respond(
            body={
                "period": {
                    "_id": "p1",
                    "classId": "c1",
                    "day": "Monday",
                    "periodNumber": 3,
                    "subjectId": {"_id": "math", "name": "Math"},
                    "teacherId": None,
                }
            }
        )

        lookup = self.api.get_period("c1", Weekday.MONDAY, 3)

        args, _ = self.last_call()
        self.assertEqual(args[1], f"{BASE}/timetable/getperiod/c1/Monday/3")
        self.assertTrue(lookup.found)
        self.assertEqual(lookup.period.subject_id, "math")
        self.assertIsNone(lookup.period.teacher_id)

    def test_get_period_404_is_absent(self):
        self.respond(404, {"message": "Period not found"})

        lookup = self.api.get_period("c1", "Tuesday", 1)

        self.assertFalse(lookup.found)

    def test_get_period_null_is_absent(self):
        self.respond(body={"period": None})

        self.assertIsNone(self.api.get_period("c1", "Tuesday", 1).period)

    def test_update_sends_wire_names(self):
        self.respond(body={"message": "Period updated"})
        update = PeriodUpdate(
            class_id="c1", day="Monday", period_number=3, subject_id="math", teacher_id="t1"
        )

        result = self.api.update_period("p1", update)

        args, kwargs = self.last_call()
        self.assertEqual(args, ("PUT", f"{BASE}/timetable/update/p1"))
        self.assertEqual(
            kwargs["json"],
            {"classId": "c1", "day": "Monday", "periodNumber": 3, "subjectId": "math", "teacherId": "t1"},
        )
        self.assertEqual(result.message, "Period updated")

    def test_create_period_omits_empty_room(self):
        self.respond(201, {"message": "Period created successfully"})

        self.api.create_period(
            PeriodCreate(class_id="c1", day="Friday", period_number=8, subject_id="s", teacher_id="t")
        )

        args, kwargs = self.last_call()
        self.assertEqual(args, ("POST", f"{BASE}/timetable/period"))
        self.assertNotIn("room", kwargs["json"])
        self.assertEqual(kwargs["json"]["periodNumber"], 8)

    def test_auto_generate_and_free_teachers(self):
        self.respond(body={"message": "Timetable generated successfully with 30 slots"})
        result = self.api.auto_generate(AutoGenerateRequest(class_id="c1", number_of_days=5, periods_per_day=6))
        _, kwargs = self.last_call()
        self.assertEqual(kwargs["json"], {"classId": "c1", "numberOfDays": 5, "periodsPerDay": 6})
        self.assertIn("30 slots", result.message)

        self.respond(body={"freeTeachers": [{"_id": "t1", "name": "Ana Ruiz", "subjectSpecialization": ["Art"]}]})
        free = self.api.find_free_teachers("wednesday", 2)
        _, kwargs = self.last_call()
        self.assertEqual(kwargs["json"], {"day": "Wednesday", "periodNumber": 2})
        self.assertEqual(free.free_teachers[0].subject_specialization, ["Art"])

    def test_teacher_timetable(self):
        self.respond(
            body={
                "teacherId": "t1",
                "teacherName": "Ana Ruiz",
                "periods": [{"day": "Monday", "period": 1, "subjectName": "Art", "className": "7 - C"}],
                "freePeriods": [{"day": "Monday", "period": 2}],
            }
        )

        timetable = self.api.teacher_timetable("t1")

        self.assertEqual(timetable.periods[0].class_name, "7 - C")
        self.assertEqual(timetable.free_periods[0].period, 2)

    def test_async_facade(self):
        self.respond(body={"period": None})

        lookup = asyncio.run(AsyncTimetableApi(self.api).get_period("c1", "Monday", 1))

        self.assertFalse(lookup.found)


class TestErrors(ApiTestCase):
    def test_status_classification(self):
        cases = {
            400: ValidationError,
            401: AuthenticationError,
            403: AuthenticationError,
            404: NotFoundError,
            409: ValidationError,
            418: PermanentError,
            422: ValidationError,
            429: RateLimitError,
            500: TransientError,
            503: TransientError,
        }
        for status, expected in cases.items():
            with self.subTest(status=status):
                error = classify_response(make_response(status, {"message": "nope"}))
                self.assertIs(type(error), expected)
                self.assertEqual(error.status_code, status)
                self.assertEqual(error.message, "nope")

    def test_success_is_not_an_error(self):
        self.assertIsNone(classify_response(make_response(204)))

    def test_validation_error_carries_server_message(self):
        self.respond(400, {"message": "Teacher not assigned to this subject"}, method="PUT")

        with self.assertRaises(ValidationError) as ctx:
            self.api.update_period(
                "p1", PeriodUpdate(class_id="c1", day="Monday", period_number=1)
            )

        self.assertEqual(ctx.exception.message, "Teacher not assigned to this subject")

    def test_connection_error_is_transient(self):
        self.session.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(TransientError):
            self.api.list_classes()

    def test_timeout_is_transient(self):
        self.session.request.side_effect = requests.Timeout("slow")

        with self.assertRaises(TransientError):
            self.api.class_timetable("c1")

    def test_non_json_body_is_permanent(self):
        self.session.request.return_value = make_response(200, raw=b"<html>oops</html>")

        with self.assertRaises(PermanentError):
            self.api.subjects_for_class("c1")

    def test_unexpected_shape_is_permanent(self):
        self.respond(body={"period": {"_id": "p1", "day": "Funday"}})

        with self.assertRaises(PermanentError):
            self.api.get_period("c1", "Monday", 1)

    def test_other_transport_failures_are_transient(self):
        for error in (
            requests.exceptions.ChunkedEncodingError("connection broken"),
            requests.exceptions.ContentDecodingError("bad gzip"),
            requests.exceptions.TooManyRedirects("redirect loop"),
        ):
            with self.subTest(error=type(error).__name__):
                self.session.request.side_effect = error

                with self.assertRaises(TransientError):
                    self.api.teachers_for_subject("math")

    def test_malformed_base_url_is_permanent(self):
        for error in (
            requests.exceptions.MissingSchema("no scheme"),
            requests.exceptions.InvalidURL("bad host"),
        ):
            with self.subTest(error=type(error).__name__):
                self.session.request.side_effect = error

                with self.assertRaises(PermanentError) as ctx:
                    self.api.list_classes()

                self.assertNotIsInstance(ctx.exception, TransientError)

    def test_non_string_error_body_gives_no_message(self):
        error = classify_response(make_response(400, {"error": {"code": "E_SLOT"}}))

        self.assertIsInstance(error, ValidationError)
        self.assertIsNone(error.message)

    def test_error_field_used_when_message_missing(self):
        error = classify_response(make_response(409, {"message": "", "error": "Slot taken"}))

        self.assertEqual(error.message, "Slot taken")

    def test_class_list_must_be_a_list(self):
        for body in (5, "classes", {"classes": {"_id": "c1"}}):
            with self.subTest(body=body):
                self.respond(body=body)

                with self.assertRaises(PermanentError):
                    self.api.list_classes()

    def test_empty_class_list_body(self):
        self.respond(body=None)

        self.assertEqual(self.api.list_classes(), [])


if __name__ == "__main__":
    unittest.main()
