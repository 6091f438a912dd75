from __future__ import annotations

from typing import Any, Dict, Mapping


class DropletError(Exception):
    """Base exception for the droplet runtime."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class UnknownOperatorError(DropletError, ValueError):
    """Raised when a condition uses an operator token that is not registered."""

    def __init__(self, token: str, *, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx["operator"] = token
        message = f"Unknown operator {token}"
        DropletError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)
        self.token = token


class UnknownFilterError(DropletError, LookupError):
    """Raised when no filter descriptor is registered under a name."""

    def __init__(self, name: str, *, context: Mapping[str, Any] | None = None) -> None:
        ctx = dict(context or {})
        ctx["filter"] = name
        message = f"Unknown filter {name}"
        DropletError.__init__(self, message, context=ctx)
        LookupError.__init__(self, message)
        self.name = name


class MissingDefaultValueError(DropletError, TypeError):
    """Raised when a filter parameter has neither a supplied value nor a default."""

    def __init__(self, filter_name: str, parameter: str) -> None:
        message = (
            f"Filter '{filter_name}' does not have a default value for "
            f"'{parameter}' and no value was supplied"
        )
        DropletError.__init__(
            self, message, context={"filter": filter_name, "parameter": parameter}
        )
        TypeError.__init__(self, message)
        self.filter_name = filter_name
        self.parameter = parameter


class ArgumentConversionError(DropletError, ValueError):
    """Raised when a filter argument cannot be represented in its declared type."""

    def __init__(
        self,
        filter_name: str,
        parameter: str,
        value: Any,
        target: type,
    ) -> None:
        message = (
            f"Filter '{filter_name}' argument '{parameter}': cannot convert "
            f"{value!r} ({type(value).__name__}) to {target.__name__}"
        )
        DropletError.__init__(
            self,
            message,
            context={
                "filter": filter_name,
                "parameter": parameter,
                "value": repr(value),
                "target": target.__name__,
            },
        )
        ValueError.__init__(self, message)


class InvalidComparisonError(DropletError, TypeError):
    """Raised when an ordering operator is applied to incomparable values."""

    def __init__(self, left: Any, right: Any) -> None:
        message = f"Comparison of {type(left).__name__} with {type(right).__name__} failed"
        DropletError.__init__(
            self,
            message,
            context={"left": type(left).__name__, "right": type(right).__name__},
        )
        TypeError.__init__(self, message)


class ContextError(DropletError):
    """Raised for misuse of the context scope stack."""


class ConfigError(DropletError, ValueError):
    """Raised when configuration is malformed or fails schema validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        DropletError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


__all__ = [
    "DropletError",
    "UnknownOperatorError",
    "UnknownFilterError",
    "MissingDefaultValueError",
    "ArgumentConversionError",
    "InvalidComparisonError",
    "ContextError",
    "ConfigError",
]
