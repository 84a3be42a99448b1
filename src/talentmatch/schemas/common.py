"""Shared field types for talentmatch schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any

import pendulum
from pydantic import AfterValidator


def to_utc(value: datetime | date | str) -> pendulum.DateTime:
    """Return ``value`` as an aware UTC datetime. Naive input is taken as UTC."""
    if isinstance(value, str):
        return pendulum.parse(value, tz="UTC").in_timezone("UTC")
    if isinstance(value, datetime):
        return pendulum.instance(value, tz="UTC").in_timezone("UTC")
    return pendulum.datetime(value.year, value.month, value.day, tz="UTC")


def _validate_utc(value: datetime) -> pendulum.DateTime:
    return to_utc(value)


UTCDateTime = Annotated[datetime, AfterValidator(_validate_utc)]


def utc_now() -> pendulum.DateTime:
    return pendulum.now("UTC")


def isoformat(value: Any) -> str | None:
    if value is None:
        return None
    return to_utc(value).to_iso8601_string()
