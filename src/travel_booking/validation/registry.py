"""Named validators the booking form is assembled from.

Field rules are looked up by name, so configuration can attach extra rules to
a field without importing them. Parameterized rules take their parameters as
keyword arguments and are bound with :meth:`ValidatorRegistry.build`.
"""

import logging
from collections.abc import Callable
from functools import partial
from threading import Lock
from typing import Any

from travel_booking.core.errors import ConfigError
from travel_booking.core.types import ValidatorFn

logger = logging.getLogger(__name__)

_validators: dict[str, ValidatorFn] = {}
_validators_lock = Lock()


class ValidatorRegistry:
    """Thread-safe mapping of rule names to validator functions."""

    @classmethod
    def register(cls, name: str) -> Callable[[ValidatorFn], ValidatorFn]:
        """
        Register a validator under ``name``.

        Usage:
            @ValidatorRegistry.register("postcode")
            def validate_postcode(value: str) -> ValidationErrors | None:
                return None if re.fullmatch(r"[0-9]{5}", value) else {"invalidPostcode": True}
        """

        def decorator(func: ValidatorFn) -> ValidatorFn:
            with _validators_lock:
                if name in _validators:
                    logger.warning(
                        f"Validator '{name}' already registered, overwriting",
                        extra={"validator_name": name},
                    )
                _validators[name] = func
            return func

        return decorator

    @classmethod
    def get(cls, name: str) -> ValidatorFn:
        """
        Look up a validator by name.

        Raises:
            ConfigError: If no validator is registered under ``name``
        """
        with _validators_lock:
            validator = _validators.get(name)
            if validator is None:
                raise ConfigError(
                    f"Validator '{name}' not registered. Available: {sorted(_validators)}"
                )
            return validator

    @classmethod
    def build(cls, name: str, **params: Any) -> ValidatorFn:
        """
        Look up a validator and bind its keyword parameters.

        Examples:
            >>> ValidatorRegistry.build("min_length", length=3)("Al")
            {'minlength': {'required_length': 3, 'actual_length': 2}}
        """
        validator = cls.get(name)
        return partial(validator, **params) if params else validator

    @classmethod
    def list_validators(cls) -> list[str]:
        """Registered names, sorted."""
        with _validators_lock:
            return sorted(_validators)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        with _validators_lock:
            return name in _validators
