"""Failure categories raised by the sampler components."""

from __future__ import annotations


class SamplerError(Exception):
    """Base class for every fatal sampler failure."""


class SensorSourceError(SamplerError):
    """The sensors binary could not be run or produced unusable output."""


class StoreError(SamplerError):
    """The SQLite store could not be opened, prepared or written."""


class ParseConsistencyError(SamplerError):
    """A value matched the numeric pattern but could not be converted."""
