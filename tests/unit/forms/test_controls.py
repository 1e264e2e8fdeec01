"""Unit tests for the reactive form model."""

import asyncio

import pytest

from travel_booking.core.constants import ControlStatus
from travel_booking.core.errors import FormStateError
from travel_booking.forms.controls import FieldControl, FormArray, FormGroup
from travel_booking.validation.rules import required


def not_blocked(value):
    return {"blocked": True} if value == "blocked" else None


class GatedCheck:
    """Async validator resolving only when the test opens the gate for a value."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, value: str) -> asyncio.Event:
        return self.gates.setdefault(value, asyncio.Event())

    async def __call__(self, value):
        await self.gate(value).wait()
        return {"taken": True} if value == "taken" else None


class TestFieldControl:
    """Tests for FieldControl."""

    def test_initial_state(self):
        # Arrange & Act
        control = FieldControl("", [required])

        # Assert
        assert control.value == ""
        assert control.status is ControlStatus.INVALID
        assert control.errors == {"required": True}
        assert control.pristine
        assert not control.touched

    def test_set_value_revalidates_and_marks_dirty(self):
        # Arrange
        control = FieldControl("", [required, not_blocked])

        # Act
        control.set_value("ok")

        # Assert
        assert control.valid
        assert control.errors is None
        assert control.dirty

    def test_errors_from_several_validators_are_merged(self):
        control = FieldControl("blocked", [not_blocked, lambda v: {"other": True}])

        assert control.errors == {"blocked": True, "other": True}

    def test_listeners_receive_new_value_in_order(self):
        # Arrange
        control = FieldControl("")
        seen: list[tuple[str, object]] = []
        control.subscribe(lambda value: seen.append(("first", value)))
        control.subscribe(lambda value: seen.append(("second", value)))

        # Act
        control.set_value("x")

        # Assert
        assert seen == [("first", "x"), ("second", "x")]

    def test_unsubscribe(self):
        control = FieldControl("")
        seen = []
        unsubscribe = control.subscribe(seen.append)

        unsubscribe()
        control.set_value("x")

        assert seen == []

    def test_set_value_without_emit(self):
        control = FieldControl("")
        seen = []
        control.subscribe(seen.append)

        control.set_value("x", emit=False)

        assert seen == []
        assert control.value == "x"

    def test_async_validation_outside_event_loop_raises(self):
        control = FieldControl("", [required], [GatedCheck()])

        with pytest.raises(FormStateError, match="running event loop"):
            control.set_value("value")

    def test_rejected_value_outside_event_loop_leaves_state_unchanged(self):
        # Arrange
        control = FieldControl("", [required], [GatedCheck()])
        group = FormGroup({"email": control})
        seen = []
        control.subscribe(seen.append)

        # Act
        with pytest.raises(FormStateError):
            control.set_value("a@b.com")

        # Assert
        assert control.value == ""
        assert control.errors == {"required": True}
        assert control.status is ControlStatus.INVALID
        assert control.pristine
        assert group.value == {"email": ""}
        assert group.invalid
        assert seen == []

    def test_sync_failure_outside_event_loop_needs_no_loop(self):
        control = FieldControl("", [required], [GatedCheck()])

        control.set_value("")

        assert control.errors == {"required": True}

    @pytest.mark.asyncio
    async def test_async_validation_is_pending_until_resolved(self):
        # Arrange
        check = GatedCheck()
        control = FieldControl("", [required], [check])
        statuses = []
        control.subscribe_status(statuses.append)

        # Act
        control.set_value("taken")

        # Assert
        assert control.pending
        check.gate("taken").set()
        await control.settle()
        assert control.invalid
        assert control.errors == {"taken": True}
        assert statuses == [ControlStatus.PENDING, ControlStatus.INVALID]

    @pytest.mark.asyncio
    async def test_async_validation_skipped_when_sync_fails(self):
        check = GatedCheck()
        control = FieldControl("x", [required], [check])

        control.set_value("")

        assert control.invalid
        assert check.gates == {}

    @pytest.mark.asyncio
    async def test_superseded_async_result_is_discarded(self):
        # Arrange
        check = GatedCheck()
        control = FieldControl("", [required], [check])
        control.set_value("taken")
        await asyncio.sleep(0)

        # Act
        control.set_value("free")
        check.gate("taken").set()
        await asyncio.sleep(0)

        # Assert: the stale result did not land
        assert control.pending
        assert control.errors is None

        check.gate("free").set()
        await control.settle()
        assert control.valid
        assert control.errors is None

    @pytest.mark.asyncio
    async def test_sync_failure_cancels_pending_check(self):
        check = GatedCheck()
        control = FieldControl("", [required], [check])
        control.set_value("taken")

        control.set_value("")
        check.gate("taken").set()
        await control.settle()

        assert control.errors == {"required": True}

    @pytest.mark.asyncio
    async def test_settle_reraises_validator_failure(self):
        async def broken(value):
            raise RuntimeError("boom")

        control = FieldControl("", [required], [broken])
        control.set_value("x")

        with pytest.raises(RuntimeError, match="boom"):
            await control.settle()

    @pytest.mark.asyncio
    async def test_crashed_async_validator_resolves_field_and_parent(self):
        # Arrange
        async def broken(value):
            raise RuntimeError("directory offline")

        control = FieldControl("", [required], [broken])
        group = FormGroup({"email": control, "name": FieldControl("Ana")})
        statuses = []
        group.subscribe_status(statuses.append)

        # Act
        control.set_value("a@b.com")
        with pytest.raises(RuntimeError):
            await group.settle()

        # Assert
        assert control.errors == {"lookupFailed": True}
        assert control.status is ControlStatus.INVALID
        assert group.status is ControlStatus.INVALID
        assert statuses[-1] is ControlStatus.INVALID

        # A new value retries the check
        control.set_value("")
        assert control.errors == {"required": True}
        await control.settle()


class TestFormGroup:
    """Tests for FormGroup."""

    def test_value_and_status_aggregate_children(self):
        # Arrange
        group = FormGroup({"a": FieldControl("", [required]), "b": FieldControl("x")})

        # Assert
        assert group.value == {"a": "", "b": "x"}
        assert group.invalid

        # Act
        group.get("a").set_value("y")

        # Assert
        assert group.valid

    def test_group_validator_sees_whole_value(self):
        def same(record):
            return None if record["a"] == record["b"] else {"mismatch": True}

        group = FormGroup({"a": FieldControl("1"), "b": FieldControl("2")}, validators=[same])

        assert group.errors == {"mismatch": True}
        group.get("b").set_value("1")
        assert group.errors is None
        assert group.valid

    def test_child_listener_runs_before_parent_listener(self):
        group = FormGroup({"a": FieldControl("")})
        order = []
        group.subscribe(lambda value: order.append(("group", value)))
        group.get("a").subscribe(lambda value: order.append(("field", value)))

        group.get("a").set_value("x")

        assert order == [("field", "x"), ("group", {"a": "x"})]

    def test_get_nested_paths(self):
        inner = FieldControl("n")
        group = FormGroup({"items": FormArray([FormGroup({"name": inner})])})

        assert group.get("items.0.name") is inner

    @pytest.mark.parametrize("path", ["missing", "items.1.name", "items.x", "items.0.nope"])
    def test_get_unknown_path_raises(self, path):
        group = FormGroup({"items": FormArray([FormGroup({"name": FieldControl("")})])})

        with pytest.raises(FormStateError, match="Unknown form control"):
            group.get(path)

    def test_iter_errors_uses_dotted_paths(self):
        group = FormGroup(
            {
                "a": FieldControl("", [required]),
                "items": FormArray([FormGroup({"name": FieldControl("", [required])})]),
            },
            validators=[lambda record: {"record": True}],
        )

        assert dict(group.iter_errors()) == {
            "__all__": {"record": True},
            "a": {"required": True},
            "items.0.name": {"required": True},
        }

    def test_mark_all_as_touched(self):
        group = FormGroup({"a": FieldControl(""), "items": FormArray([FieldControl("")])})

        group.mark_all_as_touched()

        assert group.get("a").touched
        assert group.get("items.0").touched

    @pytest.mark.asyncio
    async def test_pending_child_makes_group_pending(self):
        check = GatedCheck()
        group = FormGroup({"email": FieldControl("", [required], [check]), "b": FieldControl("x")})

        group.get("email").set_value("free")

        assert group.pending
        check.gate("free").set()
        await group.settle()
        assert group.valid

    @pytest.mark.asyncio
    async def test_invalid_child_wins_over_pending(self):
        check = GatedCheck()
        group = FormGroup(
            {"email": FieldControl("", [required], [check]), "b": FieldControl("", [required])}
        )

        group.get("email").set_value("free")

        assert group.invalid
        check.gate("free").set()
        await group.settle()


class TestFormArray:
    """Tests for FormArray."""

    def test_append_and_remove_notify_parent(self):
        # Arrange
        array = FormArray()
        group = FormGroup({"items": array})
        values = []
        group.subscribe(values.append)

        # Act
        array.append(FieldControl("a"))
        array.append(FieldControl("b"))
        array.remove_at(0)

        # Assert
        assert array.value == ["b"]
        assert values == [{"items": ["a"]}, {"items": ["a", "b"]}, {"items": ["b"]}]

    def test_removed_control_is_detached(self):
        array = FormArray([FieldControl("a")])
        removed = array[0]

        array.remove_at(0)

        assert removed.parent is None
        assert len(array) == 0

    @pytest.mark.asyncio
    async def test_remove_cancels_pending_check(self):
        check = GatedCheck()
        control = FieldControl("", [required], [check])
        array = FormArray([control])
        control.set_value("free")

        array.remove_at(0)
        await control.settle()

        assert array.valid
