# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Pydantic request / response models for the ticket endpoints.

The wire format is camelCase (``accountName``, ``underWarranty`` …); the
Python side is snake_case.  Validated request models are frozen, so a
handler can only ever see the coerced value.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    StrictBool,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from helpdesk.core.validation import (
    blank_to_none,
    clamp,
    normalize_enum,
    parse_non_negative_int,
    valid_url,
)
from helpdesk.models.ticket import Priority, WorkType

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# Column widths in helpdesk.models.ticket
MAX_TEXT_LENGTH = 255
MAX_URL_LENGTH = 2048

NonEmptyStr = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=MAX_TEXT_LENGTH)
]
OptionalText = Annotated[
    Optional[Annotated[str, StringConstraints(max_length=MAX_TEXT_LENGTH)]],
    BeforeValidator(blank_to_none),
]
# issueDescription is a TEXT column
OptionalLongText = Annotated[Optional[str], BeforeValidator(blank_to_none)]
PriorityIn = Annotated[Priority, BeforeValidator(lambda v: normalize_enum(v, Priority))]
WorkTypeIn = Annotated[
    Optional[WorkType],
    BeforeValidator(lambda v: None if blank_to_none(v) is None else normalize_enum(v, WorkType)),
]
PictureUrl = Annotated[str, StringConstraints(max_length=MAX_URL_LENGTH), AfterValidator(valid_url)]


class _CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


# -- Requests --------------------------------------------------------------


class TicketCreate(_CamelModel):
    account_name: NonEmptyStr
    city: NonEmptyStr
    contact_person: OptionalText = None
    contact_info: OptionalText = None
    priority: PriorityIn = Priority.LOW
    work_type: WorkTypeIn = None
    lease: StrictBool = False
    under_warranty: StrictBool = False
    machine_model_or_type: OptionalText = None
    issue_description: OptionalLongText = None
    requesting_tech_name: OptionalText = None
    pictures: Optional[List[PictureUrl]] = None


class TicketUpdate(_CamelModel):
    """
    Partial update.  Only keys present in the body are applied; a key sent
    with ``""`` or ``null`` clears a nullable text column.
    """

    account_name: Optional[NonEmptyStr] = None
    city: Optional[NonEmptyStr] = None
    contact_person: OptionalText = None
    contact_info: OptionalText = None
    priority: Optional[PriorityIn] = None
    work_type: WorkTypeIn = None
    lease: Optional[StrictBool] = None
    under_warranty: Optional[StrictBool] = None
    machine_model_or_type: OptionalText = None
    issue_description: OptionalLongText = None
    requesting_tech_name: OptionalText = None
    pictures: Optional[List[PictureUrl]] = None

    @field_validator(
        "account_name", "city", "priority", "lease", "under_warranty", "pictures",
        mode="after",
    )
    @classmethod
    def _not_null(cls, value):
        # Only runs for keys the client actually sent
        if value is None:
            raise ValueError("may not be null")
        return value

    @model_validator(mode="after")
    def _at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    def changes(self) -> Dict[str, Any]:
        """Snake-case mapping of the fields the client supplied."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class TicketListQuery(_CamelModel):
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @field_validator("page", "page_size", mode="before")
    @classmethod
    def _digits(cls, value):
        return parse_non_negative_int(value)

    @field_validator("page", mode="after")
    @classmethod
    def _first_page(cls, value: int) -> int:
        return max(1, value)

    @field_validator("page_size", mode="after")
    @classmethod
    def _clamp_page_size(cls, value: int) -> int:
        return clamp(value, 1, MAX_PAGE_SIZE)


# -- Responses -------------------------------------------------------------


class TicketImageResponse(_CamelModel):
    id: int
    url: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TicketResponse(_CamelModel):
    id: int
    account_name: str
    city: str
    contact_person: Optional[str]
    contact_info: Optional[str]
    priority: Priority
    work_type: Optional[WorkType]
    lease: bool
    under_warranty: bool
    machine_model_or_type: Optional[str]
    issue_description: Optional[str]
    requesting_tech_name: Optional[str]
    created_at: datetime
    updated_at: datetime
    images: List[TicketImageResponse]

    model_config = {"from_attributes": True}


class Pagination(_CamelModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class TicketListResponse(_CamelModel):
    data: List[TicketResponse]
    pagination: Pagination
