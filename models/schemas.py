"""Pydantic schemas for rows read back from the store."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class StoredReading(BaseModel):
    """One persisted row of the ``sensor_values`` table."""

    timestamp: datetime = Field(..., description="Acquisition time shared by the poll batch.")
    device: str
    label: str
    value: float
    units: str


class MetricSummary(BaseModel):
    """Statistics for one metric of one device over stored rows."""

    device: str
    label: str
    units: str
    count: int = Field(..., ge=1)
    min_value: float
    max_value: float
    mean_value: float
    first_seen: datetime
    last_seen: datetime
