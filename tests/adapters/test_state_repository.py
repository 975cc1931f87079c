from __future__ import annotations

import pytest

from rosterpy.adapters.memory import InMemoryKeyValueStore
from rosterpy.adapters.store import StateRepository, StorePayloadError
from rosterpy.domain.model import MemberStatus, RecordLayout
from rosterpy.domain.ports import KeyValueStore, StoreKey
from tests.support.factories import make_event, make_member, make_record


def test_memory_store_satisfies_port() -> None:
    assert isinstance(InMemoryKeyValueStore(), KeyValueStore)


def test_memory_store_copies_values() -> None:
    store = InMemoryKeyValueStore()
    value = {"a": ["b"]}

    store.set(StoreKey.NAME_RESOLUTIONS, value)
    value["a"].append("c")
    loaded = store.get(StoreKey.NAME_RESOLUTIONS)

    assert loaded == {"a": ["b"]}
    assert store.get(StoreKey.EVENTS) is None


def test_missing_keys_load_as_empty(memory_store: InMemoryKeyValueStore) -> None:
    repository = StateRepository(memory_store)

    assert repository.load_roster() == []
    assert repository.load_events() == []
    assert repository.load_records() == []
    assert repository.load_name_resolutions() == {}
    assert repository.load_destination_resolutions() == {}
    assert repository.load_record_layout() == RecordLayout()
    assert repository.load_custom_headers() == ()


def test_collections_round_trip(memory_store: InMemoryKeyValueStore) -> None:
    repository = StateRepository(memory_store)
    member = make_member(
        status=MemberStatus.EXPATRIATE, position_year=3, custom_fields={"비고": "야간"}
    )
    event = make_event(identity_key="knox-강병훈")
    record = make_record()

    repository.save_roster([member])
    repository.save_events([event])
    repository.save_records([record])
    repository.save_name_resolutions({"강병훈": "knox-강병훈"})
    repository.save_destination_resolutions({event.id: record.id})
    repository.save_record_layout(RecordLayout(max_columns=8, headers=("이름",)))
    repository.save_custom_headers(("비고",))

    assert repository.load_roster() == [member]
    assert repository.load_events() == [event]
    assert repository.load_records() == [record]
    assert repository.load_name_resolutions() == {"강병훈": "knox-강병훈"}
    assert repository.load_destination_resolutions() == {event.id: record.id}
    assert repository.load_record_layout() == RecordLayout(max_columns=8, headers=("이름",))
    assert repository.load_custom_headers() == ("비고",)


def test_saved_values_are_json_compatible(memory_store: InMemoryKeyValueStore) -> None:
    StateRepository(memory_store).save_roster([make_member()])

    raw = memory_store.get(StoreKey.ROSTER)

    assert isinstance(raw, list)
    assert raw[0]["status"] == "재직"
    assert isinstance(raw[0]["created_at"], str)


def test_invalid_payload_raises_store_payload_error() -> None:
    store = InMemoryKeyValueStore({StoreKey.EVENTS: [{"id": "e1", "name": "강병훈"}]})

    with pytest.raises(StorePayloadError) as excinfo:
        StateRepository(store).load_events()

    assert excinfo.value.key is StoreKey.EVENTS
    assert "events" in str(excinfo.value)


def test_blank_text_fields_are_tolerated() -> None:
    store = InMemoryKeyValueStore(
        {
            StoreKey.RECORDS: [
                {
                    "id": "r1",
                    "name": "강병훈",
                    "destination": None,
                    "created_at": "2026-02-11T09:00:00+00:00",
                    "updated_at": "2026-02-11T09:00:00+00:00",
                }
            ]
        }
    )

    record = StateRepository(store).load_records()[0]

    assert record.destination == ""
    assert record.raw_data == ()
