"""
Streaming API Models - Educational Documentation
================================================

REQUEST BODIES:
---------------
    POST /api/chat     {"message": "..."}
    POST /api/explain  {"spanText": "...", "context": "..."}

WHY NOT LET FASTAPI VALIDATE THE BODY?
--------------------------------------
FastAPI answers a body that fails model validation with 422 and a list of
field errors. The relay's clients expect a 400 with one short message:

    {"error": "spanText and context required"}

so routes read the raw JSON and call ``from_payload``, which turns any
failure (missing field, wrong type, blank value, malformed JSON) into an
``InvalidInputError`` carrying the endpoint's message. The application's
exception handler renders that as the 400 body.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from spanlens.core.config.constants import (
    ERROR_MESSAGE_REQUIRED,
    ERROR_SPAN_REQUIRED,
    ERROR_SPAN_TOO_LONG,
)
from spanlens.core.exceptions import InvalidInputError


def _require_text(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        raise ValueError("must not be blank")
    return value


class ChatRequestModel(BaseModel):
    """Body of ``POST /api/chat``."""

    model_config = ConfigDict(extra="ignore")

    message: str = Field(..., min_length=1, description="User message to send to the LLM")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        return _require_text(v)

    @classmethod
    def from_payload(cls, payload: Any) -> "ChatRequestModel":
        """
        Validate a decoded JSON body.

        Raises:
            InvalidInputError: "message required"
        """
        if not isinstance(payload, dict):
            raise InvalidInputError(ERROR_MESSAGE_REQUIRED)
        try:
            return cls.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidInputError(
                ERROR_MESSAGE_REQUIRED, details={"fields": _failed_fields(e)}
            ) from e


class ExplainRequestModel(BaseModel):
    """
    Body of ``POST /api/explain``.

    ``context`` must be present but may be empty. ``spanText`` is trimmed.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    span_text: str = Field(..., alias="spanText", min_length=1, description="Selected span")
    context: str = Field(..., description="Text surrounding the span")

    @field_validator("span_text")
    @classmethod
    def strip_span(cls, v: str) -> str:
        return _require_text(v).strip()

    @classmethod
    def from_payload(cls, payload: Any, max_span_length: int | None = None) -> "ExplainRequestModel":
        """
        Validate a decoded JSON body.

        Raises:
            InvalidInputError: "spanText and context required", or
                "spanText too long" when over ``max_span_length``
        """
        if not isinstance(payload, dict):
            raise InvalidInputError(ERROR_SPAN_REQUIRED)
        try:
            body = cls.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidInputError(
                ERROR_SPAN_REQUIRED, details={"fields": _failed_fields(e)}
            ) from e

        if max_span_length is not None and len(body.span_text) > max_span_length:
            raise InvalidInputError(
                ERROR_SPAN_TOO_LONG,
                details={"length": len(body.span_text), "max": max_span_length},
            )
        return body


def _failed_fields(error: PydanticValidationError) -> list[str]:
    return [".".join(str(part) for part in item["loc"]) for item in error.errors()]
