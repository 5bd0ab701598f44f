"""
Service provider notification models.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import DecodeError


class Action(str, Enum):
    """Lifecycle actions sent by the service platform."""
    ENABLED = "enabled"
    CREATED = "created"
    RELEASE = "release"
    DELETED = "deleted"
    DISABLED = "disabled"


class Confirmation(BaseModel):
    """Callback the platform expects once a release has been cleaned up."""
    model_config = ConfigDict(extra="ignore")

    url: str = ""
    deadline: Optional[datetime] = None
    header: Dict[str, str] = Field(default_factory=dict)
    method: str = ""

    @field_validator("header", mode="before")
    @classmethod
    def _null_header(cls, value):
        return value if value is not None else {}


class Notification(BaseModel):
    """One lifecycle event for a consumer account or project."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    action: str
    version: int = 0
    aws_account_id: str = ""
    account_id: str = Field(default="", alias="account_guid")
    project_id: str = Field(default="", alias="project_guid")
    confirmation: Optional[Confirmation] = None
    regions: List[str] = Field(default_factory=list)
    project_email: str = ""

    @field_validator("confirmation", mode="before")
    @classmethod
    def _empty_confirmation(cls, value):
        # The platform sends an empty object for actions without a callback
        if not value:
            return None
        return value

    @field_validator("regions", mode="before")
    @classmethod
    def _null_regions(cls, value):
        return value if value is not None else []

    @property
    def known_action(self) -> Optional[Action]:
        """The action as an Action member, or None if it is not recognized."""
        try:
            return Action(self.action)
        except ValueError:
            return None


def parse_notification(raw: Union[bytes, str]) -> Notification:
    """
    Parse a raw notification payload.

    Unknown action values are accepted here and reported by the dispatcher.

    Args:
        raw: JSON document, e.g. the body of an SQS message

    Returns:
        Notification

    Raises:
        DecodeError: If the payload is not JSON or does not match the schema
    """
    if raw is None or (isinstance(raw, (bytes, str)) and not raw.strip()):
        raise DecodeError("empty payload")

    try:
        return Notification.model_validate_json(raw)
    except ValidationError as e:
        raise DecodeError(_summarize(e)) from e


def _summarize(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        problems.append(f"{location}: {item.get('msg')}")
    return "; ".join(problems)
