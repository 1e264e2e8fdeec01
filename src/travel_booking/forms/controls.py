"""Reactive form model.

A form is a tree of controls: ``FieldControl`` leaves holding scalar values,
``FormGroup`` nodes keyed by name and ``FormArray`` nodes holding an ordered,
resizable list. Every control carries its own errors and status and lets
callers register change listeners.

Change propagation is synchronous and ordered: a control validates itself,
notifies its own listeners, then hands over to its parent, which revalidates
and notifies its listeners in turn.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

from travel_booking.core.constants import LOOKUP_FAILED, RECORD_ERRORS_KEY, ControlStatus
from travel_booking.core.errors import FormStateError
from travel_booking.core.types import (
    AsyncValidatorFn,
    ChangeListener,
    ValidationErrors,
    ValidatorFn,
)

logger = logging.getLogger(__name__)


class AbstractControl:
    """Base class for fields, groups and arrays."""

    def __init__(self, validators: Iterable[ValidatorFn] | None = None) -> None:
        self._validators: list[ValidatorFn] = list(validators or [])
        self._value_listeners: list[ChangeListener] = []
        self._status_listeners: list[Callable[[ControlStatus], None]] = []
        self.parent: "FormGroup | FormArray | None" = None
        self.errors: ValidationErrors | None = None
        self.status = ControlStatus.VALID
        self.pristine = True
        self.touched = False

    @property
    def value(self) -> Any:
        raise NotImplementedError

    @property
    def valid(self) -> bool:
        return self.status is ControlStatus.VALID

    @property
    def invalid(self) -> bool:
        return self.status is ControlStatus.INVALID

    @property
    def pending(self) -> bool:
        return self.status is ControlStatus.PENDING

    @property
    def dirty(self) -> bool:
        return not self.pristine

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a value-change listener.

        Returns:
            Callable removing the listener again
        """
        self._value_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._value_listeners:
                self._value_listeners.remove(listener)

        return unsubscribe

    def subscribe_status(self, listener: Callable[[ControlStatus], None]) -> Callable[[], None]:
        """Register a listener called whenever the status is recomputed."""
        self._status_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return unsubscribe

    def mark_as_touched(self) -> None:
        self.touched = True

    def mark_all_as_touched(self) -> None:
        self.mark_as_touched()

    def update_value_and_validity(self, *, emit: bool = True, propagate: bool = True) -> None:
        """Rerun validation and notify listeners.

        Args:
            emit: Notify value and status listeners
            propagate: Continue with the parent control afterwards
        """
        self.errors = self._run_validators()
        self._after_sync_validation()
        self.status = self._calculate_status()

        if emit:
            self._emit_value()
            self._emit_status()

        if propagate and self.parent is not None:
            self.parent.update_value_and_validity(emit=emit)

    def iter_errors(self, path: str = "") -> Iterator[tuple[str, ValidationErrors]]:
        """Yield ``(dotted path, errors)`` for this control and its descendants."""
        if self.errors:
            yield path or RECORD_ERRORS_KEY, self.errors

    async def settle(self) -> None:
        """Wait until no asynchronous validation is in flight."""
        return None

    def discard(self) -> None:
        """Release resources held by a control being removed from the tree."""
        return None

    def _run_validators(self) -> ValidationErrors | None:
        return _collect_errors(self._validators, self.value)

    def _after_sync_validation(self) -> None:
        return None

    def _calculate_status(self) -> ControlStatus:
        return ControlStatus.INVALID if self.errors else ControlStatus.VALID

    def _refresh_status(self) -> None:
        # Status-only update after an async result, value listeners stay quiet
        self.status = self._calculate_status()
        self._emit_status()
        if self.parent is not None:
            self.parent._refresh_status()

    def _emit_value(self) -> None:
        value = self.value
        for listener in list(self._value_listeners):
            listener(value)

    def _emit_status(self) -> None:
        for listener in list(self._status_listeners):
            listener(self.status)


class FieldControl(AbstractControl):
    """A single scalar field.

    Sync validators run on every change. Async validators only run when the
    sync ones pass; the control is PENDING until they resolve. A newer value
    cancels the in-flight check, and a check that resolves for a value the
    control no longer holds is discarded.

    Async validators need a running event loop; a change that would start one
    outside a loop raises ``FormStateError`` and leaves the control untouched.
    An async validator that raises resolves the field as ``lookupFailed``.
    """

    def __init__(
        self,
        value: Any = None,
        validators: Iterable[ValidatorFn] | None = None,
        async_validators: Iterable[AsyncValidatorFn] | None = None,
    ) -> None:
        super().__init__(validators)
        self._value = value
        self._async_validators: list[AsyncValidatorFn] = list(async_validators or [])
        self._pending_task: asyncio.Task[None] | None = None
        self.update_value_and_validity(emit=False, propagate=False)

    @property
    def value(self) -> Any:
        return self._value

    def set_value(self, value: Any, *, emit: bool = True) -> None:
        """Store a new value as user input and revalidate.

        Raises:
            FormStateError: If the value would start async validation outside
                a running event loop
        """
        if self._async_validators and _collect_errors(self._validators, value) is None:
            _running_loop()

        self._value = value
        self.pristine = False
        self.update_value_and_validity(emit=emit)

    async def settle(self) -> None:
        """Wait for the in-flight check; re-raise it if the validator crashed."""
        while self._pending_task is not None:
            task = self._pending_task
            await asyncio.wait({task})
            if task is self._pending_task:
                # Cancelled from outside before it could resolve
                self._resolve_as_failed()
            if not task.cancelled():
                task.result()

    def discard(self) -> None:
        self._cancel_pending()

    def _after_sync_validation(self) -> None:
        self._cancel_pending()
        if self.errors or not self._async_validators:
            return

        loop = _running_loop()
        self._pending_task = loop.create_task(self._validate_async(self._value))

    def _calculate_status(self) -> ControlStatus:
        if self.errors:
            return ControlStatus.INVALID
        if self._pending_task is not None:
            return ControlStatus.PENDING
        return ControlStatus.VALID

    def _cancel_pending(self) -> None:
        if self._pending_task is not None:
            self._pending_task.cancel()
            self._pending_task = None

    def _resolve_as_failed(self) -> None:
        self._pending_task = None
        self.errors = {LOOKUP_FAILED: True}
        self._refresh_status()

    async def _validate_async(self, value: Any) -> None:
        try:
            results = await asyncio.gather(
                *(validator(value) for validator in self._async_validators)
            )
        except Exception:
            if asyncio.current_task() is self._pending_task:
                logger.warning("Async validator failed", exc_info=True)
                self._resolve_as_failed()
            raise

        if asyncio.current_task() is not self._pending_task or self._value != value:
            logger.debug("Discarding superseded async validation result")
            return

        errors: ValidationErrors = {}
        for result in results:
            if result:
                errors.update(result)

        self._pending_task = None
        self.errors = errors or None
        self._refresh_status()


class FormGroup(AbstractControl):
    """Named collection of controls, validated as a whole by its own validators."""

    def __init__(
        self,
        controls: Mapping[str, AbstractControl],
        validators: Iterable[ValidatorFn] | None = None,
    ) -> None:
        super().__init__(validators)
        self.controls: dict[str, AbstractControl] = dict(controls)
        for control in self.controls.values():
            control.parent = self
        self.update_value_and_validity(emit=False, propagate=False)

    @property
    def value(self) -> dict[str, Any]:
        return {name: control.value for name, control in self.controls.items()}

    def get(self, path: str) -> AbstractControl:
        """Resolve a dotted path such as ``additional_passengers.0.name``.

        Raises:
            FormStateError: If any segment does not exist
        """
        control: AbstractControl = self
        for segment in path.split("."):
            if isinstance(control, FormGroup) and segment in control.controls:
                control = control.controls[segment]
            elif isinstance(control, FormArray) and segment.isdigit() and int(segment) < len(control):
                control = control[int(segment)]
            else:
                raise FormStateError(f"Unknown form control: '{path}'")
        return control

    def mark_all_as_touched(self) -> None:
        self.mark_as_touched()
        for control in self.controls.values():
            control.mark_all_as_touched()

    def iter_errors(self, path: str = "") -> Iterator[tuple[str, ValidationErrors]]:
        yield from super().iter_errors(path)
        for name, control in self.controls.items():
            yield from control.iter_errors(f"{path}.{name}" if path else name)

    async def settle(self) -> None:
        await asyncio.gather(*(control.settle() for control in self.controls.values()))

    def discard(self) -> None:
        for control in self.controls.values():
            control.discard()

    def _calculate_status(self) -> ControlStatus:
        return _combined_status(self.errors, self.controls.values())


class FormArray(AbstractControl):
    """Ordered, resizable list of controls."""

    def __init__(
        self,
        controls: Sequence[AbstractControl] = (),
        validators: Iterable[ValidatorFn] | None = None,
    ) -> None:
        super().__init__(validators)
        self.controls: list[AbstractControl] = list(controls)
        for control in self.controls:
            control.parent = self
        self.update_value_and_validity(emit=False, propagate=False)

    @property
    def value(self) -> list[Any]:
        return [control.value for control in self.controls]

    def __len__(self) -> int:
        return len(self.controls)

    def __getitem__(self, index: int) -> AbstractControl:
        return self.controls[index]

    def append(self, control: AbstractControl, *, emit: bool = True) -> None:
        control.parent = self
        self.controls.append(control)
        self.update_value_and_validity(emit=emit)

    def remove_at(self, index: int, *, emit: bool = True) -> None:
        control = self.controls.pop(index)
        control.discard()
        control.parent = None
        self.update_value_and_validity(emit=emit)

    def mark_all_as_touched(self) -> None:
        self.mark_as_touched()
        for control in self.controls:
            control.mark_all_as_touched()

    def iter_errors(self, path: str = "") -> Iterator[tuple[str, ValidationErrors]]:
        yield from super().iter_errors(path)
        for index, control in enumerate(self.controls):
            yield from control.iter_errors(f"{path}.{index}" if path else str(index))

    async def settle(self) -> None:
        await asyncio.gather(*(control.settle() for control in self.controls))

    def discard(self) -> None:
        for control in self.controls:
            control.discard()

    def _calculate_status(self) -> ControlStatus:
        return _combined_status(self.errors, self.controls)


def _collect_errors(validators: Iterable[ValidatorFn], value: Any) -> ValidationErrors | None:
    errors: ValidationErrors = {}
    for validator in validators:
        result = validator(value)
        if result:
            errors.update(result)
    return errors or None


def _running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise FormStateError("Asynchronous validation requires a running event loop") from e


def _combined_status(
    errors: ValidationErrors | None, children: Iterable[AbstractControl]
) -> ControlStatus:
    statuses = {child.status for child in children}
    if errors or ControlStatus.INVALID in statuses:
        return ControlStatus.INVALID
    if ControlStatus.PENDING in statuses:
        return ControlStatus.PENDING
    return ControlStatus.VALID
