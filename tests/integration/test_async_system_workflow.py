"""Integration tests for AsyncSystem relationships among its member Units."""

import pytest

from unitflow import AsyncSystem, AsyncSystemBase, BoolUnit, GenericUnit, NumUnit, StringUnit
from unitflow.persistence import retrieve


def _recorded(system):
    received = []
    system.subscribe(received.append)
    return received


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_initial_value():
    """A fresh AsyncSystem combines its members' defaults"""
    system = AsyncSystem()

    assert system.value() == {"query": None, "data": None, "error": None, "pending": False}
    assert system.emit_count == 1


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_seeds_members_from_initial_value():
    """initial_value is split across the members by role"""
    system = AsyncSystem(initial_value={"query": "q", "data": [1], "pending": True})

    assert system.query_unit.value() == "q"
    assert system.data_unit.value() == [1]
    assert system.error_unit.value() is None
    assert system.pending_unit.value() is True


@pytest.mark.integration
@pytest.mark.async_system
def test_query_sets_pending_and_emits_once():
    """A query makes the system pending, with a single system emission"""
    system = AsyncSystem()
    received = _recorded(system)

    system.query_unit.dispatch("search")

    assert received[1:] == [{"query": "search", "data": None, "error": None, "pending": True}]


@pytest.mark.integration
@pytest.mark.async_system
def test_full_request_cycle():
    """query, then error, then query, then data leaves only the data"""
    system = AsyncSystem()
    received = _recorded(system)

    system.query_unit.dispatch(1)
    system.error_unit.dispatch("timeout")
    system.query_unit.dispatch(2)
    system.data_unit.dispatch("result")

    assert received[-1] == {"query": 2, "data": "result", "error": None, "pending": False}
    assert len(received) == 5


@pytest.mark.integration
@pytest.mark.async_system
def test_error_clears_pending_and_keeps_data_by_default():
    """An error ends pending, leaving old data in place unless configured"""
    system = AsyncSystem()
    system.data_unit.dispatch("old")
    system.query_unit.dispatch(1)

    system.error_unit.dispatch("boom")

    assert system.value() == {"query": 1, "data": "old", "error": "boom", "pending": False}


@pytest.mark.integration
@pytest.mark.async_system
def test_clear_data_on_error():
    """clear_data_on_error empties data when an error arrives"""
    system = AsyncSystem(clear_data_on_error=True)
    system.data_unit.dispatch("old")

    system.error_unit.dispatch("boom")

    assert system.data_unit.value() is None


@pytest.mark.integration
@pytest.mark.async_system
def test_clear_data_and_error_on_query():
    """clear_data_on_query and clear_error_on_query reset the previous answer"""
    system = AsyncSystem(clear_data_on_query=True, clear_error_on_query=True)
    system.data_unit.dispatch("old")
    system.error_unit.dispatch("boom")

    system.query_unit.dispatch("again")

    assert system.value() == {"query": "again", "data": None, "error": None, "pending": True}


@pytest.mark.integration
@pytest.mark.async_system
def test_clear_error_on_data_can_be_disabled():
    """clear_error_on_data=False keeps the error when data arrives"""
    system = AsyncSystem(clear_error_on_data=False)
    system.error_unit.dispatch("boom")

    system.data_unit.dispatch("ok")

    assert system.error_unit.value() == "boom"


@pytest.mark.integration
@pytest.mark.async_system
def test_clear_query_on_data_and_error():
    """clear_query_on_data / clear_query_on_error empty the query"""
    on_data = AsyncSystem(clear_query_on_data=True)
    on_error = AsyncSystem(clear_query_on_error=True)
    on_data.query_unit.dispatch("q")
    on_error.query_unit.dispatch("q")

    on_data.data_unit.dispatch("d")
    on_error.error_unit.dispatch("e")

    assert on_data.query_unit.value() is None
    assert on_error.query_unit.value() is None


@pytest.mark.integration
@pytest.mark.async_system
def test_auto_update_pending_value_can_be_disabled():
    """Without auto_update_pending_value, pending is left to the caller"""
    system = AsyncSystem(auto_update_pending_value=False)

    system.query_unit.dispatch("q")

    assert system.pending_unit.value() is False


@pytest.mark.integration
@pytest.mark.async_system
def test_freeze_query_while_pending():
    """The query Unit is frozen while pending and unfrozen afterwards"""
    system = AsyncSystem(freeze_query_while_pending=True)

    system.query_unit.dispatch("first")
    assert system.query_unit.is_frozen
    assert system.query_unit.dispatch("second") is False

    system.data_unit.dispatch("done")
    assert not system.query_unit.is_frozen
    assert system.query_unit.dispatch("second") is True


@pytest.mark.integration
@pytest.mark.async_system
def test_manual_pending_dispatch_emits_system_value():
    """Dispatching pending directly is reflected in one system emission"""
    system = AsyncSystem()
    received = _recorded(system)

    system.pending_unit.dispatch(True)

    assert received[-1]["pending"] is True
    assert len(received) == 2


@pytest.mark.integration
@pytest.mark.async_system
def test_paused_relationships_do_not_react():
    """While paused, member updates neither trigger rules nor system emissions"""
    system = AsyncSystem()
    received = _recorded(system)

    system.pause_relationships()
    system.pause_relationships()
    system.query_unit.dispatch("q")

    assert not system.relationships_working
    assert system.pending_unit.value() is False
    assert len(received) == 1


@pytest.mark.integration
@pytest.mark.async_system
def test_resume_emits_once_if_members_changed():
    """Resuming emits the combined value once when something changed"""
    system = AsyncSystem()
    received = _recorded(system)
    system.pause_relationships()
    system.query_unit.dispatch("q")
    system.data_unit.dispatch("d")

    system.resume_relationships()
    system.resume_relationships()

    assert system.relationships_working
    assert len(received) == 2
    assert received[-1] == {"query": "q", "data": "d", "error": None, "pending": False}


@pytest.mark.integration
@pytest.mark.async_system
def test_resume_without_changes_does_not_emit():
    """Nothing changed while paused means nothing emitted on resume"""
    system = AsyncSystem()
    received = _recorded(system)

    system.pause_relationships()
    system.resume_relationships()

    assert len(received) == 1


@pytest.mark.integration
@pytest.mark.async_system
def test_member_ids_are_derived_from_system_id():
    """Members get <id>_QUERY style ids unless configured otherwise"""
    system = AsyncSystem(id="user", data_unit={"id": "profile"})

    assert system.query_unit.config.id == "user_QUERY"
    assert system.data_unit.config.id == "profile"
    assert system.error_unit.config.id == "user_ERROR"
    assert system.pending_unit.config.id == "user_PENDING"


@pytest.mark.integration
@pytest.mark.async_system
def test_member_overrides_and_shared_units_config():
    """units applies to all members; role sections win over it"""
    system = AsyncSystem(units={"cache_size": 5}, query_unit={"cache_size": 1})

    assert system.query_unit.cache_size == 1
    assert system.data_unit.cache_size == 5
    assert system.pending_unit.cache_size == 5


@pytest.mark.integration
@pytest.mark.async_system
@pytest.mark.persistence
def test_persistent_members_use_derived_ids(storage):
    """A persistent data Unit is saved under its derived id"""
    system = AsyncSystem(id="todos", data_unit={"persistent": True, "storage": storage})

    system.data_unit.dispatch(["milk"])

    assert retrieve("todos_DATA", storage) == {"value": ["milk"]}


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_base_accepts_custom_units():
    """AsyncSystemBase composes any four Units"""
    system = AsyncSystemBase(StringUnit(), NumUnit(), GenericUnit(), BoolUnit())

    system.query_unit.dispatch("q")
    system.data_unit.dispatch(42)

    assert system.value() == {"query": "q", "data": 42, "error": None, "pending": False}


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_base_requires_bool_pending_unit():
    """The pending member must be a BoolUnit"""
    with pytest.raises(TypeError):
        AsyncSystemBase(GenericUnit(), GenericUnit(), GenericUnit(), GenericUnit())


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_create_stream_receives_all_members():
    """create_stream hands query, data, error and pending to the producer"""
    system = AsyncSystem()

    def fetch(query, data, error, pending):
        return query.future.then(lambda q: data.dispatch(f"result for {q}"))

    stream = system.create_stream(fetch)
    system.query_unit.dispatch("x")

    assert system.value() == {
        "query": "x",
        "data": "result for x",
        "error": None,
        "pending": False,
    }
    stream.unsubscribe()


@pytest.mark.integration
@pytest.mark.async_system
def test_async_system_value_is_frozen_under_check_immutability(strict_environment):
    """With check_immutability, the combined value is read-only"""
    system = AsyncSystem()

    with pytest.raises(TypeError):
        system.value()["query"] = "x"


@pytest.mark.integration
@pytest.mark.async_system
def test_relationships_keep_working_after_a_member_subscriber_raises():
    """A subscriber error during a relationship does not leave relationships paused"""
    system = AsyncSystem()
    failures = ["boom"]

    def fail_once(is_pending):
        if is_pending and failures:
            raise RuntimeError(failures.pop())

    system.pending_unit.future.subscribe(fail_once)

    with pytest.raises(RuntimeError, match="boom"):
        system.query_unit.dispatch("q1")

    assert system.relationships_working

    system.query_unit.dispatch("q2")
    assert system.pending_unit.value() is True
    system.data_unit.dispatch("done")
    assert system.value() == {"query": "q2", "data": "done", "error": None, "pending": False}
