from __future__ import annotations

from typing import Any, Mapping, Optional


class SchemaError(Exception):
    """A schema is malformed in a way traversal cannot absorb."""

    def __init__(
        self,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
        inner_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = dict(context) if context else {}
        self.inner_error = inner_error
        if inner_error is not None:
            self.__cause__ = inner_error


class SchemaLoadError(SchemaError):
    pass


class PathRangeError(IndexError):
    def __init__(self, path: str, requested: int, available: int):
        super().__init__(
            f"Cannot take {requested} component(s) from path {path!r} with {available} component(s)"
        )
        self.path = path
        self.requested = requested
        self.available = available


class SettingsError(ValueError):
    pass


__all__ = ["SchemaError", "SchemaLoadError", "PathRangeError", "SettingsError"]
