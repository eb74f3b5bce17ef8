"""
Shipyard Exceptions

Exception classes raised by the strategy executor, the object store and the
fleet tooling, plus an aggregate error for operations that keep going after
individual failures.
"""

from typing import Any


class ShipyardError(Exception):
    """Base exception carrying the context needed to log and requeue."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


# ==================== Executor errors ==================== #


class StrategyConfigurationError(ShipyardError):
    """Raised when a strategy or release spec cannot be evaluated.

    Not retryable: an operator has to fix the strategy or the release.
    """


class OutOfRangeStepError(StrategyConfigurationError):
    """Raised when a release targets a step its strategy does not have."""

    def __init__(self, release: str, step: int, step_count: int):
        super().__init__(
            f"release {release!r} targets step {step} but its strategy has {step_count} steps",
            {"release": release, "step": step, "step_count": step_count},
        )
        self.release = release
        self.step = step
        self.step_count = step_count


class InvalidStepValueError(StrategyConfigurationError):
    """Raised when a step percentage is not an integer between 0 and 100.

    Accepted values are decimal digits with an optional leading ``+``, surrounded
    by optional whitespace. Signs other than ``+``, decimals, exponents and values
    above 100 are rejected.
    """

    def __init__(self, release: str, step: int, field_name: str, value: str):
        super().__init__(
            f"release {release!r}, step {step}: {field_name} {value!r} is not a percentage",
            {"release": release, "step": step, "field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value


class MissingTargetError(ShipyardError):
    """Raised when a release has no installation, capacity or traffic target yet."""

    def __init__(self, release: str, kind: str):
        super().__init__(
            f"release {release!r} has no {kind}",
            {"release": release, "kind": kind},
        )
        self.release = release
        self.kind = kind


# ==================== Store errors ==================== #


class StoreError(ShipyardError):
    """Base exception for object store operations."""


class ObjectNotFoundError(StoreError):
    """Raised when an object does not exist in the store."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} {key!r} not found", {"kind": kind, "key": key})
        self.kind = kind
        self.key = key


class ConflictError(StoreError):
    """Raised when a write carries a stale resource version."""

    def __init__(self, kind: str, key: str, expected: int, actual: int):
        super().__init__(
            f"{kind} {key!r} was modified: expected version {expected}, found {actual}",
            {"kind": kind, "key": key, "expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


# ==================== Aggregation ==================== #


class AggregateError(ShipyardError):
    """Several independent failures reported as one."""

    def __init__(self, errors: list[Exception]):
        self.errors = list(errors)
        noun = "error" if len(self.errors) == 1 else "errors"
        details = "; ".join(str(error) for error in self.errors)
        super().__init__(f"{len(self.errors)} {noun}: {details}")

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)


class ErrorList:
    """Collects errors; an empty list means no error at all."""

    def __init__(self) -> None:
        self._errors: list[Exception] = []

    def append(self, error: Exception | None) -> None:
        if error is None:
            return
        if isinstance(error, AggregateError):
            self._errors.extend(error.errors)
        else:
            self._errors.append(error)

    def extend(self, other: "ErrorList") -> None:
        self._errors.extend(other.errors)

    @property
    def errors(self) -> list[Exception]:
        return list(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def as_exception(self) -> AggregateError | None:
        if not self._errors:
            return None
        return AggregateError(self._errors)

    def raise_if_any(self) -> None:
        error = self.as_exception()
        if error is not None:
            raise error
