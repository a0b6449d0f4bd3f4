from __future__ import annotations

from relsync.domain.relations import diff_collections, identity_key, index_by_identity
from tests.helpers.records import OrderLine


def line(identity: int | str | None, sku: str = "X") -> OrderLine:
    return OrderLine(id=identity, sku=sku)  # pyright: ignore[reportArgumentType]


def test_identity_key_normalises_to_strings() -> None:
    assert identity_key(7) == "7"
    assert identity_key("7") == "7"
    assert identity_key(None) is None
    assert identity_key("") is None
    assert identity_key(0) == "0"


def test_index_by_identity_skips_blank_and_keeps_last_duplicate() -> None:
    first = line(1, "A")
    second = line(1, "B")
    unsaved = line(None)

    index = index_by_identity([first, unsaved, second])

    assert list(index) == ["1"]
    assert index["1"] is second


def test_upsert_is_new_collection_in_order() -> None:
    old = [line(1), line(2)]
    new = [line(3), old[0], line(None), line(None)]

    plan = diff_collections(old, new)

    assert len(plan.upsert) == len(new)
    assert all(a is b for a, b in zip(plan.upsert, new, strict=True))


def test_remove_holds_old_members_missing_from_new_in_old_order() -> None:
    a, b, c, d = line(1), line(2), line(3), line(4)

    plan = diff_collections([d, a, c, b], [a, line(None)])

    assert list(plan.remove) == [d, c, b]


def test_remove_matches_identity_across_instances_and_types() -> None:
    stored = line(5)
    from_form = line("5")

    plan = diff_collections([stored], [from_form])

    assert plan.remove == ()
    assert plan.upsert == (from_form,)


def test_remove_ignores_old_records_without_identity() -> None:
    plan = diff_collections([line(None), line("")], [])

    assert plan.remove == ()


def test_remove_counts_duplicate_old_identity_once() -> None:
    earlier = line(9, "first")
    later = line(9, "second")
    other = line(1)

    plan = diff_collections([earlier, other, later], [])

    assert plan.remove == (later, other)


def test_empty_collections() -> None:
    plan = diff_collections([], [])

    assert plan.upsert == ()
    assert plan.remove == ()
