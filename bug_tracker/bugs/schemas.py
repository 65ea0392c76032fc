"""
Bug record schemas.

``BugCreate`` and ``BugPatch`` are the validation boundary for incoming
payloads; ``Bug`` is the stored record handed back to callers. On the wire
every model uses camelCase names (``stepsToReproduce``, ``createdAt``,
``updatedAt``); Python code uses the snake_case attributes.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    constr,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .enums import Priority, Status
from .errors import FieldError, ValidationError

TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000

# Only these keys may be explicitly cleared with null in a patch.
NULLABLE_FIELDS = {"stepsToReproduce", "steps_to_reproduce"}

TitleStr = constr(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH)
DescriptionStr = constr(min_length=DESCRIPTION_MIN_LENGTH, max_length=DESCRIPTION_MAX_LENGTH)
NameStr = constr(strip_whitespace=True, min_length=1)


def generate_bug_id() -> str:
    """Generate a new bug identifier (UUID4)."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def normalize_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """Trim tags, drop blanks and duplicates, keep first-seen order."""
    if tags is None:
        return None
    seen = set()
    result = []
    for tag in tags:
        tag = tag.strip()
        if not tag or tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class BugCreate(_CamelModel):
    """Schema for reporting a new bug. Status is always ``open`` on creation."""

    title: TitleStr
    description: DescriptionStr
    priority: Priority
    assignee: NameStr
    reporter: NameStr
    environment: NameStr
    reproducible: StrictBool = False
    steps_to_reproduce: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(value)


class BugPatch(_CamelModel):
    """Partial update. Every field is optional; an empty patch is valid."""

    title: Optional[TitleStr] = None
    description: Optional[DescriptionStr] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    assignee: Optional[NameStr] = None
    reporter: Optional[NameStr] = None
    environment: Optional[NameStr] = None
    reproducible: Optional[StrictBool] = None
    steps_to_reproduce: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return normalize_tags(value)

    def is_empty(self) -> bool:
        return not self.model_fields_set

    def changes(self) -> Dict[str, Any]:
        """Fields present in the patch, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class Bug(_CamelModel):
    """A stored bug record."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    description: str
    priority: Priority
    status: Status = Status.OPEN
    assignee: str
    reporter: str
    environment: str
    reproducible: bool = False
    steps_to_reproduce: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is stored as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def check_timestamps(self) -> "Bug":
        if self.created_at > self.updated_at:
            raise ValueError("createdAt must not be later than updatedAt")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and ISO-8601 timestamps."""
        return self.model_dump(mode="json", by_alias=True)


def _field_errors(exc: PydanticValidationError) -> List[FieldError]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        errors.append(FieldError(field=field, message=err["msg"]))
    return errors


def _require_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationError(
            [FieldError(field="body", message="Expected a JSON object")]
        )
    return payload


def validate_create(payload: Union[BugCreate, Mapping[str, Any]]) -> BugCreate:
    """Validate a creation payload, reporting every violated field at once."""
    if isinstance(payload, BugCreate):
        return payload
    payload = _require_mapping(payload)
    try:
        return BugCreate.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(_field_errors(exc)) from exc


def validate_patch(payload: Union[BugPatch, Mapping[str, Any]]) -> BugPatch:
    """Validate a partial update.

    Explicit nulls are rejected for every field except ``stepsToReproduce``;
    they are reported alongside any other violations.
    """
    if isinstance(payload, BugPatch):
        return payload
    payload = _require_mapping(payload)

    errors = [
        FieldError(field=key, message="Field may not be null")
        for key, value in payload.items()
        if value is None and key not in NULLABLE_FIELDS
    ]
    nulls = {e.field for e in errors}

    patch = None
    try:
        patch = BugPatch.model_validate(
            {k: v for k, v in payload.items() if k not in nulls}
        )
    except PydanticValidationError as exc:
        errors.extend(_field_errors(exc))

    if errors:
        raise ValidationError(errors)
    return patch
