"""Type aliases shared by validators and the form model."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# None means valid; otherwise one entry per failure kind
ValidationErrors: TypeAlias = dict[str, Any]

ValidatorFn: TypeAlias = Callable[[Any], ValidationErrors | None]
AsyncValidatorFn: TypeAlias = Callable[[Any], Awaitable[ValidationErrors | None]]

ChangeListener: TypeAlias = Callable[[Any], None]
