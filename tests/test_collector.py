"""Tests for the signature collector."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from sigscan.collector import SignatureCollector
from sigscan.models import SignatureRow
from sigscan.readers import DecodeError, UnsupportedValueError
from sigscan.registry import SignatureRegistry
from sigscan.signatures import ContainerRef, InlineContainer, RecordSignature, ScalarKind
from sigscan.values import Clob, SExp, Struct, Symbol


def _scan(values, min_size: int = 2) -> SignatureRegistry:
    registry = SignatureRegistry()
    SignatureCollector(registry, min_size=min_size).collect(values)
    return registry


def test_scalars_reduce_to_kinds_without_registration(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    assert collector.reduce(42, top_level=True) is ScalarKind.INT
    assert collector.reduce(Symbol("s"), top_level=True) is ScalarKind.SYMBOL
    assert len(registry) == 0


def test_field_order_does_not_change_signature(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    first = collector.reduce({"b": 1, "a": "x"}, top_level=True)
    second = collector.reduce({"a": "y", "b": 2}, top_level=True)

    assert first == second == ContainerRef(0)
    assert registry.render(0) == "{ a: string, b: int }"
    assert registry.entry(0).occurrence_count == 2


def test_element_order_changes_signature(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    first = collector.reduce([1, "a"], top_level=True)
    second = collector.reduce(["a", 1], top_level=True)

    assert first != second
    assert registry.render(0) == "[ int, string ]"
    assert registry.render(1) == "[ string, int ]"


def test_list_and_sequence_register_separately(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    as_list = collector.reduce([1, "a"], top_level=True)
    as_sexp = collector.reduce(SExp((1, "a")), top_level=True)

    assert as_list != as_sexp
    assert registry.render(1) == "( int string )"


def test_threshold_boundary(collector: SignatureCollector, registry: SignatureRegistry) -> None:
    small = collector.reduce({"a": 1}, top_level=True)
    assert small == InlineContainer(RecordSignature((("a", ScalarKind.INT),)))
    assert len(registry) == 0

    pair = collector.reduce({"a": 1, "b": 2}, top_level=True)
    assert pair == ContainerRef(0)
    assert len(registry) == 1


def test_nested_small_shapes_add_weight_to_parent(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    result = collector.reduce({"a": {"b": 1}}, top_level=True)

    assert result == ContainerRef(0)
    assert len(registry) == 1
    assert registry.render(0) == "{ a: { b: int } }"


def test_larger_threshold_keeps_shapes_inline() -> None:
    registry = _scan([{"x": 1, "y": 2}, [1, 2, 3]], min_size=3)

    assert [row.signature for row in registry.report_rows()] == ["[ int, int, int ]"]


def test_zero_threshold_registers_empty_containers() -> None:
    registry = _scan([[], {}, [], SExp()], min_size=0)

    rows = {row.signature: row.count for row in registry.report_rows()}
    assert rows == {"[  ]": 2, "{  }": 1, "(  )": 1}


def test_count_accuracy_for_identical_values() -> None:
    values = [{"id": n, "name": f"item-{n}", "tags": ["a", "b"]} for n in range(5)]

    registry = _scan(values)
    registry.inline_single_parent_signatures()

    assert registry.report_rows() == [
        SignatureRow(id=1, signature="{ id: int, name: string, tags: [ string, string ] }", count=5)
    ]


def test_end_to_end_mixed_field_types() -> None:
    registry = _scan([{"x": 1, "y": 2}, {"x": 3, "y": 4}, {"x": 5, "y": "s"}])
    registry.inline_single_parent_signatures()

    assert registry.report_rows() == [
        SignatureRow(id=0, signature="{ x: int, y: int }", count=2),
        SignatureRow(id=1, signature="{ x: int, y: string }", count=1),
    ]


def test_parent_counted_once_per_new_parent_shape(registry: SignatureRegistry) -> None:
    collector = SignatureCollector(registry)
    for _ in range(3):
        collector.reduce({"inner": {"b": 1, "c": 2}, "d": 3}, top_level=True)

    inner = registry.entry(0)
    assert inner.occurrence_count == 3
    assert inner.distinct_parent_count == 1
    assert inner.seen_at_top_level is False
    assert registry.entry(1).occurrence_count == 3


def test_distinct_parents_are_counted(registry: SignatureRegistry) -> None:
    collector = SignatureCollector(registry)
    collector.collect(
        [
            {"p": {"b": 1, "c": 2}, "x": 1},
            {"q": {"b": 1, "c": 2}},
        ]
    )

    assert registry.entry(0).distinct_parent_count == 2
    registry.inline_single_parent_signatures()
    assert [row.signature for row in registry.report_rows()] == [
        "{ b: int, c: int }",
        "{ p: (#0), x: int }",
        "{ q: (#0) }",
    ]


def test_single_parent_helper_is_inlined() -> None:
    registry = _scan([{"inner": {"b": 1, "c": 2}, "d": 3}])

    assert registry.inline_single_parent_signatures() == [0]
    assert registry.report_rows() == [
        SignatureRow(id=1, signature="{ d: int, inner: { b: int, c: int } }", count=1)
    ]


def test_shape_seen_at_top_level_survives_inlining() -> None:
    registry = _scan([{"b": 1, "c": 2}, {"inner": {"b": 3, "c": 4}, "d": 5}])

    assert registry.inline_single_parent_signatures() == []
    assert registry.report_rows() == [
        SignatureRow(id=0, signature="{ b: int, c: int }", count=2),
        SignatureRow(id=1, signature="{ d: int, inner: (#0) }", count=1),
    ]


def test_chained_helpers_inline_bottom_up() -> None:
    registry = _scan([{"a": {"b": {"c": 1, "d": 2}, "e": 1}}])

    assert registry.size(registry.entry(2).signature) == 5
    assert registry.inline_single_parent_signatures() == [0, 1]
    assert registry.report_rows() == [
        SignatureRow(id=2, signature="{ a: { b: { c: int, d: int }, e: int } }", count=1)
    ]


def test_rich_scalar_kinds_take_part_in_shapes() -> None:
    value = {
        "when": datetime(2024, 5, 1),
        "amount": Decimal("9.99"),
        "raw": b"\x00",
        "text": Clob(b"abc"),
        "kind": Symbol("order"),
        "note": None,
        "ok": False,
        "ratio": 0.5,
    }

    registry = _scan([value])

    assert registry.render(0) == (
        "{ amount: decimal, kind: symbol, note: null, ok: bool, "
        "ratio: float, raw: blob, text: clob, when: timestamp }"
    )


def test_non_string_field_names_are_stringified(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    collector.reduce({2: "b", 1: "a"}, top_level=True)

    assert registry.render(0) == "{ 1: string, 2: string }"


def test_unsupported_values_raise(collector: SignatureCollector) -> None:
    with pytest.raises(UnsupportedValueError, match="set"):
        collector.reduce({"a": {1, 2}, "b": 1}, top_level=True)


def test_negative_threshold_rejected(registry: SignatureRegistry) -> None:
    with pytest.raises(ValueError):
        SignatureCollector(registry, min_size=-1)


def test_collect_propagates_source_errors(collector: SignatureCollector) -> None:
    def _values():
        yield {"a": 1, "b": 2}
        raise RuntimeError("truncated input")

    with pytest.raises(RuntimeError, match="truncated input"):
        collector.collect(_values())


def test_deeply_nested_values_reduce_and_render() -> None:
    value: object = [1, 2]
    for _ in range(1200):
        value = [value]

    registry = _scan([value])

    assert len(registry) == 1201
    assert registry.inline_single_parent_signatures() == list(range(1200))
    assert registry.report_rows() == [
        SignatureRow(id=1200, signature="[ " * 1201 + "int, int" + " ]" * 1201, count=1)
    ]


def test_reference_cycle_raises_decode_error(collector: SignatureCollector) -> None:
    looped: list = [1]
    looped.append({"self": looped})

    with pytest.raises(DecodeError, match="reference cycle"):
        collector.reduce(looped, top_level=True)


def test_shared_containers_are_not_cycles(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    shared = {"x": 1, "y": 2}

    collector.reduce([shared, shared], top_level=True)

    assert registry.entry(0).occurrence_count == 2
    assert registry.render(1) == "[ (#0), (#0) ]"


def test_repeated_field_names_are_kept(
    collector: SignatureCollector, registry: SignatureRegistry
) -> None:
    collector.reduce(Struct([("b", None), ("a", 1), ("a", "x")]), top_level=True)

    assert registry.render(0) == "{ a: int, a: string, b: null }"
