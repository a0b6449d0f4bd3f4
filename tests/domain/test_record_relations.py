from __future__ import annotations

import pytest

from relsync.domain.errors import InvalidRelationRequestError
from relsync.domain.relations import HasMany
from tests.helpers.records import InMemoryRecordStore, Order, OrderLine, OrderNote


def test_descriptor_reads_and_assigns_the_relation(record_store: InMemoryRecordStore) -> None:
    order = record_store.add(Order())
    lines = [OrderLine(sku="A")]

    order.lines = lines

    assert order.lines == lines
    assert order.relation("lines") is order.lines
    assert isinstance(Order.lines, HasMany)
    assert "HasMany(OrderLine" in repr(Order.lines)


def test_load_relations_merges_payload(record_store: InMemoryRecordStore) -> None:
    order = record_store.add(Order())
    kept = record_store.add(OrderLine(order_id=order.id, sku="A"))
    dropped = record_store.add(OrderLine(order_id=order.id, sku="B"))
    payload = {
        "Order": {"customer": "ACME"},
        "OrderLine": [{"id": kept.id, "quantity": 5}, {"sku": "C"}],
    }

    assert order.load(payload)
    assert order.load_relations(payload, ["lines"])
    assert order.save()
    assert order.save_relations()

    assert order.customer == "ACME"
    assert order.lines[0] is kept
    assert kept.quantity == 5
    assert order.lines[1].sku == "C"
    assert order.lines[1].order_id == order.id
    assert record_store.removed == [dropped]


def test_load_relations_without_input_keeps_relation_unassigned(
    record_store: InMemoryRecordStore,
) -> None:
    order = record_store.add(Order())

    assert order.load_relations({"Order": {"customer": "x"}}, ["lines"]) is False

    assert order.relation_state.snapshots.names() == ()


def test_load_relations_honours_identity_field_env(
    record_store: InMemoryRecordStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("RELSYNC_PAYLOAD_IDENTITY_FIELD", "line_id")
    order = record_store.add(Order())
    line = record_store.add(OrderLine(order_id=order.id, sku="A"))

    assert order.load_relations({"OrderLine": [{"line_id": line.id, "sku": "Z"}]}, ["lines"])

    assert order.lines == [line]
    assert line.sku == "Z"


def test_load_relations_rejects_relations_not_kept_updated() -> None:
    with pytest.raises(InvalidRelationRequestError, match="notes"):
        Order().load_relations({}, ["notes"])

    with pytest.raises(InvalidRelationRequestError, match="payments"):
        Order().load_relations({}, ["lines", "payments"])


def test_load_relation_primaries_back_fills_identities() -> None:
    order = Order()
    order.lines = [OrderLine(sku="A"), OrderLine(sku="B")]

    assert order.load_relation_primaries({"OrderLine": {"0": {"id": 31}, "1": {"id": 32}}})

    assert [line.id for line in order.lines] == [31, 32]
    assert [line.sku for line in order.lines] == ["A", "B"]


def test_load_relation_primaries_without_rows() -> None:
    order = Order()

    assert order.load_relation_primaries({"OrderLine": "n/a"}) is False
    assert order.load_relation_primaries({}) is False


def test_deep_clone_copies_parent_and_children(record_store: InMemoryRecordStore) -> None:
    order = record_store.add(Order(customer="ACME"))
    record_store.add(OrderLine(order_id=order.id, sku="A", quantity=2))
    record_store.add(OrderLine(order_id=order.id, sku="B"))
    record_store.add(OrderNote(order_id=order.id, name="not cloned"))

    clone = order.deep_clone()

    assert clone.id is None
    assert clone.customer == "ACME"
    assert [line.id for line in clone.lines] == [None, None]
    assert [(line.sku, line.quantity) for line in clone.lines] == [("A", 2), ("B", 1)]
    assert clone.relation_state.snapshots.names() == ("lines",)


def test_saving_a_deep_clone_inserts_new_rows(record_store: InMemoryRecordStore) -> None:
    order = record_store.add(Order(customer="ACME"))
    record_store.add(OrderLine(order_id=order.id, sku="A"))

    clone = order.deep_clone()
    assert clone.save()
    assert clone.save_relations()

    [line] = clone.lines
    assert line.id is not None
    assert line.order_id == clone.id != order.id
    assert record_store.removed == []
