"""Base schema configuration for all Pydantic models.

Usage:
    - APIRequest: incoming API request bodies
    - APIResponse: outgoing API response bodies
    - DownstreamRequest: requests sent to external services
    - DownstreamResponse: responses received from external services

All of them speak camelCase on the wire and accept snake_case in Python.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Private base schema; inherit from one of the public subclasses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Incoming bodies: unknown properties are ignored."""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
    )


class APIResponse(_BaseSchema):
    """Outgoing bodies: only declared properties are returned."""

    model_config = ConfigDict(
        extra="forbid",
    )


class DownstreamRequest(_BaseSchema):
    """Requests to other services: only declared properties are sent."""

    model_config = ConfigDict(
        extra="forbid",
    )


class DownstreamResponse(_BaseSchema):
    """Responses from other services: new upstream properties are tolerated."""

    model_config = ConfigDict(
        extra="ignore",
    )
