"""Unit tests for the admission pipeline of Units."""

import numpy as np
import pytest

from unitflow import (
    BoolUnit,
    DictUnit,
    DispatchFailReason,
    GenericUnit,
    ListUnit,
    NumUnit,
    SerializabilityError,
    StringUnit,
)
from unitflow.events import EventUnitDispatch, EventUnitDispatchFail


@pytest.mark.unit
@pytest.mark.dispatch
@pytest.mark.parametrize(
    "unit_cls, default",
    [
        (BoolUnit, False),
        (NumUnit, 0),
        (StringUnit, ""),
        (ListUnit, []),
        (DictUnit, {}),
        (GenericUnit, None),
    ],
)
def test_units_start_with_their_default_value(unit_cls, default):
    """Without an initial value, each flavor holds its kind's default"""
    unit = unit_cls()

    assert unit.value() == default
    assert unit.emit_count == 1
    assert unit.cached_values() == [default]


@pytest.mark.unit
@pytest.mark.dispatch
def test_invalid_initial_value_falls_back_to_default():
    """An initial value failing the validator is replaced by the default"""
    unit = NumUnit(initial_value="five")

    assert unit.value() == 0
    assert unit.initial_value() == 0


@pytest.mark.unit
@pytest.mark.dispatch
def test_accepted_dispatch_updates_value_and_notifies_subscribers():
    """A valid dispatch returns True, stores the value and pushes it"""
    unit = NumUnit()
    received = []
    unit.subscribe(received.append)

    result = unit.dispatch(5)

    assert result is True
    assert unit.value() == 5
    assert received == [0, 5]
    assert unit.emit_count == 2


@pytest.mark.unit
@pytest.mark.dispatch
def test_dispatch_with_producer_receives_current_value():
    """A callable is called with the current value to produce the next one"""
    unit = NumUnit(initial_value=2)

    unit.dispatch(lambda value: value * 3)

    assert unit.value() == 6


@pytest.mark.unit
@pytest.mark.dispatch
@pytest.mark.parametrize(
    "unit_cls, invalid",
    [
        (BoolUnit, 1),
        (NumUnit, True),
        (NumUnit, float("nan")),
        (NumUnit, "1"),
        (StringUnit, 1),
        (ListUnit, (1, 2)),
        (DictUnit, [("a", 1)]),
    ],
)
def test_validator_rejects_values_of_the_wrong_kind(unit_cls, invalid):
    """Values of the wrong kind are rejected and leave the Unit untouched"""
    unit = unit_cls()
    before = unit.emit_count

    assert unit.dispatch(invalid) is False
    assert unit.emit_count == before


@pytest.mark.unit
@pytest.mark.dispatch
def test_num_unit_accepts_numpy_numbers():
    """numpy scalars pass the number validator"""
    unit = NumUnit()

    assert unit.dispatch(np.float64(1.5)) is True
    assert unit.value() == 1.5


@pytest.mark.unit
@pytest.mark.dispatch
def test_force_cannot_bypass_validator():
    """Even a forced dispatch must pass the kind's validator"""
    unit = StringUnit()

    assert unit.dispatch(1, force=True) is False


@pytest.mark.unit
@pytest.mark.dispatch
def test_distinct_check_rejects_equal_values_unless_forced():
    """With distinct_dispatch_check, repeating the current value is rejected"""
    unit = NumUnit(distinct_dispatch_check=True, initial_value=3)
    received = []
    unit.future.subscribe(received.append)

    assert unit.dispatch(3) is False
    assert unit.dispatch(3, force=True) is True
    assert received == [3]


@pytest.mark.unit
@pytest.mark.dispatch
def test_distinct_check_uses_identity_for_containers():
    """An equal but new list is distinct from the current list"""
    unit = ListUnit(distinct_dispatch_check=True)
    current = unit.raw_value()

    assert unit.dispatch(current) is False
    assert unit.dispatch([]) is True


@pytest.mark.unit
@pytest.mark.dispatch
def test_custom_dispatch_check_receives_current_and_candidate():
    """The custom check is called with (current, candidate) and can veto"""
    calls = []

    def only_increase(current, candidate):
        calls.append((current, candidate))
        return candidate > current

    unit = NumUnit(initial_value=5, custom_dispatch_check=only_increase)

    assert unit.dispatch(4) is False
    assert unit.dispatch(6) is True
    assert calls == [(5, 4), (5, 6)]


@pytest.mark.unit
@pytest.mark.dispatch
def test_force_skips_custom_check():
    """force=True skips the custom check"""
    unit = NumUnit(custom_dispatch_check=lambda current, candidate: False)

    assert unit.dispatch(1) is False
    assert unit.dispatch(1, force=True) is True


@pytest.mark.unit
@pytest.mark.dispatch
def test_would_dispatch_has_no_side_effects():
    """would_dispatch answers without changing the Unit"""
    unit = NumUnit(distinct_dispatch_check=True)

    assert unit.would_dispatch(1) is True
    assert unit.would_dispatch(0) is False
    assert unit.would_dispatch(0, force=True) is True
    assert unit.value() == 0
    assert unit.emit_count == 1


@pytest.mark.unit
@pytest.mark.dispatch
def test_dispatch_events_report_value_and_options():
    """Accepted dispatches emit EventUnitDispatch with the options used"""
    unit = NumUnit()
    events = []
    unit.events.subscribe(events.append)

    unit.dispatch(1, cache_replace=True)

    assert len(events) == 1
    assert isinstance(events[0], EventUnitDispatch)
    assert events[0].value == 1
    assert events[0].options.cache_replace is True


@pytest.mark.unit
@pytest.mark.dispatch
@pytest.mark.parametrize(
    "setup, value, reason",
    [
        (lambda u: u.freeze(), 1, DispatchFailReason.FROZEN),
        (lambda u: None, "x", DispatchFailReason.INVALID_VALUE),
        (lambda u: None, -1, DispatchFailReason.CUSTOM_CHECK),
        (lambda u: None, 0, DispatchFailReason.DISTINCT_CHECK),
    ],
)
def test_dispatch_fail_reports_first_failing_check(setup, value, reason):
    """Rejections carry the first failing check in admission order"""
    unit = NumUnit(
        distinct_dispatch_check=True,
        custom_dispatch_check=lambda current, candidate: candidate >= 0,
    )
    events = []
    unit.events.subscribe(events.append)
    setup(unit)

    assert unit.dispatch(value) is False

    fails = [e for e in events if isinstance(e, EventUnitDispatchFail)]
    assert len(fails) == 1
    assert fails[0].reason is reason
    assert fails[0].value == value


@pytest.mark.unit
@pytest.mark.dispatch
def test_frozen_reason_wins_over_invalid_value():
    """A frozen Unit reports FROZEN even for values of the wrong kind"""
    unit = NumUnit()
    events = []
    unit.events.subscribe(events.append)
    unit.freeze()

    unit.dispatch("x")

    assert events[-1].reason is DispatchFailReason.FROZEN


@pytest.mark.unit
@pytest.mark.dispatch
def test_events_pushed_before_first_access_are_dropped():
    """The events stream only exists once accessed"""
    unit = NumUnit()
    unit.dispatch(1)
    events = []

    unit.events.subscribe(events.append)

    assert events == []


@pytest.mark.unit
@pytest.mark.dispatch
def test_immutable_unit_stores_a_private_copy():
    """Mutating the dispatched object does not affect an immutable Unit"""
    unit = DictUnit(immutable=True)
    payload = {"a": [1]}

    unit.dispatch(payload)
    payload["a"].append(2)

    assert unit.value() == {"a": [1]}


@pytest.mark.unit
@pytest.mark.dispatch
def test_immutable_unit_hands_out_copies():
    """value() of an immutable Unit is a fresh copy each time"""
    unit = DictUnit(immutable=True, initial_value={"a": 1})

    first = unit.value()
    first["a"] = 2

    assert unit.value() == {"a": 1}
    assert unit.value() is not unit.raw_value()


@pytest.mark.unit
@pytest.mark.dispatch
def test_mutable_unit_shares_the_dispatched_object():
    """Without immutable, value() is the stored object itself"""
    unit = DictUnit()
    payload = {"a": 1}

    unit.dispatch(payload)

    assert unit.value() is payload


@pytest.mark.unit
@pytest.mark.dispatch
def test_serializability_check_rejects_non_json_values(strict_environment):
    """check_serializability raises for values that cannot be persisted"""
    unit = GenericUnit()

    with pytest.raises(SerializabilityError):
        unit.dispatch({"when": object()})
    assert unit.value() is None


@pytest.mark.unit
@pytest.mark.dispatch
def test_serializability_check_is_off_by_default():
    """Without the environment check any value is accepted"""
    unit = GenericUnit()
    marker = object()

    assert unit.dispatch(marker) is True
    assert unit.value() is marker


@pytest.mark.unit
@pytest.mark.dispatch
def test_to_json_string_serializes_current_value():
    """to_json_string returns the JSON of the raw value"""
    unit = DictUnit(initial_value={"a": [1, 2]})

    assert unit.to_json_string() == '{"a": [1, 2]}'


@pytest.mark.unit
@pytest.mark.dispatch
def test_subscriber_exceptions_propagate_to_dispatcher():
    """Errors raised by subscribers surface at the dispatch call"""
    unit = NumUnit()

    def fail(value):
        if value == 1:
            raise RuntimeError("boom")

    unit.subscribe(fail)

    with pytest.raises(RuntimeError, match="boom"):
        unit.dispatch(1)
