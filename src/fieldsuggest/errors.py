# fieldsuggest/errors.py
from __future__ import annotations


class SuggestError(Exception):
    """Base class for every error raised inside fieldsuggest."""


class DataSourceError(SuggestError):
    """A historical source is missing, unreadable or malformed.

    Sources raise it internally; IndexManager recovers it as an empty dataset.
    """


class UnknownFieldError(SuggestError, KeyError):
    """A field name outside the supported FieldType set."""

    def __init__(self, name: object) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown field type: {self.name!r}"
