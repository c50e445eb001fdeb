import datetime
import math
import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from dates import parse_date


_DURATION_RE = re.compile(r"([+-]?\d+)(\.\d*)?")


def number_to_text(value):
    """Accept JSON numbers where text is expected (``123`` -> ``"123"``)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


# Request shapes: validated before anything is written.
class UserCreate(BaseModel):
    username: str = Field(min_length=1)

    @field_validator("username", mode="before")
    @classmethod
    def coerce_username(cls, value):
        return number_to_text(value)


class ExerciseCreate(BaseModel):
    description: str = Field(min_length=1)
    duration: int  # minutes
    date: Optional[datetime.date] = None

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, value):
        return number_to_text(value)

    @field_validator("duration", mode="before")
    @classmethod
    def parse_duration(cls, value):
        # Like parseInt: fractional minutes are truncated.
        if isinstance(value, bool):
            raise ValueError("duration must be a number")
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("duration must be finite")
            return int(value)
        if isinstance(value, str):
            match = _DURATION_RE.fullmatch(value.strip())
            if not match:
                raise ValueError("duration must be a number")
            return int(match.group(1))
        return value

    @field_validator("date", mode="before")
    @classmethod
    def parse_exercise_date(cls, value):
        # Blank form fields mean "today".
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return parse_date(value)


# Stored records
class User(BaseModel):
    id: str
    username: str


class Exercise(BaseModel):
    id: str
    user_id: str
    description: str
    duration: int
    date: datetime.date
