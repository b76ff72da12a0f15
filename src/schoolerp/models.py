"""Pydantic models for timetable data exchanged with the ERP backend.

All data structures use Pydantic v2 for validation, serialization, and type safety.
The backend speaks camelCase JSON with Mongo-style ``_id`` keys; models accept
both the wire names and the Python field names, and dump back to the wire names
with ``model_dump(by_alias=True)``.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

PERIODS_PER_DAY = 8


class Weekday(str, Enum):
    """School days a period can be scheduled on (Mon-Sat)."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def position(self) -> int:
        return list(Weekday).index(self)

    @classmethod
    def parse(cls, value: "str | Weekday") -> "Weekday":
        """Case-insensitive lookup ('monday', 'Monday' and Weekday.MONDAY all work)."""
        if isinstance(value, Weekday):
            return value
        for day in cls:
            if day.value.lower() == str(value).strip().lower():
                return day
        raise ValueError(f"Unknown day {value!r}. Valid: {[day.value for day in cls]}")


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)
PERIOD_NUMBERS: tuple[int, ...] = tuple(range(1, PERIODS_PER_DAY + 1))


def _ref_id(value: Any) -> Any:
    """Collapse a populated reference ({"_id": ..., "name": ...}) to its id."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


class ErpModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ClassRef(ErpModel):
    """A class (grade + section), e.g. 10 - A."""

    id: str = Field(validation_alias=AliasChoices("_id", "id", "classId"))
    grade: str
    section: str = ""

    @field_validator("grade", "section", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @property
    def label(self) -> str:
        return f"{self.grade} - {self.section}" if self.section else self.grade


class SubjectRef(ErpModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    code: str | None = None


class TeacherRef(ErpModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    first_name: str = Field(
        default="", validation_alias=AliasChoices("firstName", "first_name")
    )
    last_name: str = Field(
        default="", validation_alias=AliasChoices("lastName", "last_name")
    )
    email: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Period(ErpModel):
    """One weekly slot of a class timetable.

    ``subjectId``/``teacherId`` come back either as bare ids or as populated
    objects depending on the endpoint; both collapse to the id string.
    """

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    class_id: str = Field(validation_alias=AliasChoices("classId", "class_id"))
    day: Weekday
    period_number: int = Field(
        ge=1,
        le=PERIODS_PER_DAY,
        validation_alias=AliasChoices("periodNumber", "period", "period_number"),
    )
    subject_id: str | None = Field(
        default=None, validation_alias=AliasChoices("subjectId", "subject_id")
    )
    teacher_id: str | None = Field(
        default=None, validation_alias=AliasChoices("teacherId", "teacher_id")
    )
    room: str | None = None

    @field_validator("class_id", "subject_id", "teacher_id", mode="before")
    @classmethod
    def _collapse_ref(cls, value: Any) -> Any:
        return _ref_id(value) or None


class PeriodUpdate(ErpModel):
    """Body of PUT /timetable/update/{periodId}."""

    class_id: str = Field(alias="classId")
    day: Weekday
    period_number: int = Field(alias="periodNumber", ge=1, le=PERIODS_PER_DAY)
    subject_id: str | None = Field(default=None, alias="subjectId")
    teacher_id: str | None = Field(default=None, alias="teacherId")


class PeriodCreate(PeriodUpdate):
    """Body of POST /timetable/period."""

    room: str | None = None


class AutoGenerateRequest(ErpModel):
    class_id: str = Field(alias="classId", min_length=1)
    number_of_days: int = Field(default=6, alias="numberOfDays", ge=1, le=len(WEEKDAYS))
    periods_per_day: int = Field(
        default=PERIODS_PER_DAY, alias="periodsPerDay", ge=1, le=PERIODS_PER_DAY
    )


class FreeTeacher(ErpModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str
    email: str | None = None
    department: str | None = None
    subject_specialization: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("subjectSpecialization", "subject_specialization"),
    )


class TimetableEntry(ErpModel):
    """A populated period as shown in a weekly grid."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    day: Weekday
    period: int = Field(
        ge=1,
        le=PERIODS_PER_DAY,
        validation_alias=AliasChoices("period", "periodNumber"),
    )
    subject_name: str = Field(default="", validation_alias=AliasChoices("subjectName", "subject_name"))
    subject_code: str | None = Field(default=None, validation_alias=AliasChoices("subjectCode", "subject_code"))
    teacher_name: str = Field(default="", validation_alias=AliasChoices("teacherName", "teacher_name"))
    class_name: str = Field(default="", validation_alias=AliasChoices("className", "class_name"))
    room: str | None = None


class FreeSlot(ErpModel):
    day: Weekday
    period: int = Field(ge=1, le=PERIODS_PER_DAY)


class ClassTimetable(ErpModel):
    class_id: str = Field(validation_alias=AliasChoices("classId", "class_id"))
    class_name: str = Field(default="", validation_alias=AliasChoices("className", "class_name"))
    periods: list[TimetableEntry] = Field(default_factory=list)
    total_days: int = Field(default=len(WEEKDAYS), validation_alias=AliasChoices("totalDays", "total_days"))
    total_periods: int = Field(
        default=PERIODS_PER_DAY, validation_alias=AliasChoices("totalPeriods", "total_periods")
    )


class TeacherTimetable(ErpModel):
    teacher_id: str = Field(validation_alias=AliasChoices("teacherId", "teacher_id"))
    teacher_name: str = Field(default="", validation_alias=AliasChoices("teacherName", "teacher_name"))
    periods: list[TimetableEntry] = Field(default_factory=list)
    free_periods: list[FreeSlot] = Field(
        default_factory=list, validation_alias=AliasChoices("freePeriods", "free_periods")
    )


# Endpoint envelopes. Each has an explicit empty/absent variant so callers
# never have to check optional keys on a raw dict.


class SubjectList(ErpModel):
    subjects: list[SubjectRef] = Field(default_factory=list)

    @field_validator("subjects", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return value or []


class TeacherList(ErpModel):
    teachers: list[TeacherRef] = Field(default_factory=list)

    @field_validator("teachers", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return value or []

    def ids(self) -> set[str]:
        return {teacher.id for teacher in self.teachers}


class PeriodLookup(ErpModel):
    period: Period | None = None

    @property
    def found(self) -> bool:
        return self.period is not None


class FreeTeacherList(ErpModel):
    free_teachers: list[FreeTeacher] = Field(
        default_factory=list, validation_alias=AliasChoices("freeTeachers", "free_teachers")
    )

    @field_validator("free_teachers", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return value or []


class MessageResponse(ErpModel):
    message: str | None = None
    success: bool | None = None


class LoginResponse(ErpModel):
    token: str
    message: str | None = None
    user: dict[str, Any] | None = None
