"""Tests for the helper-object operation table."""

from __future__ import annotations

import pytest

from invidiarr.domain.exceptions import ExtractionFailed
from invidiarr.infrastructure.cipher.operations import (
    build_operation_table,
    classify,
    drop_prefix,
    reverse,
    rotate_left,
    split_entries,
    swap_at_offset,
)


def _apply(operation, value: str, argument: int = 0) -> str:
    seq = list(value)
    operation(seq, argument)
    return "".join(seq)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class TestPrimitives:
    def test_reverse(self) -> None:
        assert _apply(reverse, "abcdef") == "fedcba"

    def test_reverse_ignores_argument(self) -> None:
        assert _apply(reverse, "abc", 45) == "cba"

    def test_drop_prefix(self) -> None:
        assert _apply(drop_prefix, "abcdef", 2) == "cdef"

    def test_drop_prefix_beyond_length(self) -> None:
        assert _apply(drop_prefix, "abc", 10) == ""

    def test_swap_at_offset(self) -> None:
        assert _apply(swap_at_offset, "abcdef", 3) == "dbcaef"

    def test_swap_wraps_offset(self) -> None:
        # 8 % 6 == 2
        assert _apply(swap_at_offset, "abcdef", 8) == "cbadef"

    def test_swap_on_empty_is_noop(self) -> None:
        assert _apply(swap_at_offset, "", 3) == ""

    def test_rotate_left(self) -> None:
        assert _apply(rotate_left, "abcdef", 2) == "cdefab"

    def test_rotate_full_cycle(self) -> None:
        assert _apply(rotate_left, "abcdef", 6) == "abcdef"

    def test_rotate_on_empty_is_noop(self) -> None:
        assert _apply(rotate_left, "", 2) == ""


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassify:
    def test_reverse(self) -> None:
        assert classify("function(a){a.reverse()}") is reverse

    def test_splice(self) -> None:
        assert classify("function(a,b){a.splice(0,b)}") is drop_prefix

    def test_temp_variable_swap(self) -> None:
        impl = "function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}"
        assert classify(impl) is swap_at_offset

    def test_nested_splice_swap(self) -> None:
        impl = "function(a,b){a.splice(0,1,a.splice(b,1,a[0])[0])}"
        assert classify(impl) is swap_at_offset

    def test_push_shift_rotate(self) -> None:
        impl = "function(a,b){for(b%=a.length;b--;)a.push(a.shift())}"
        assert classify(impl) is rotate_left

    def test_unknown_shape(self) -> None:
        assert classify("function(a){return a.length}") is None

    def test_dollar_identifiers(self) -> None:
        swap = "function(a,b){var $c=a[0];a[0]=a[b%a.length];a[b%a.length]=$c}"
        rotate = "function($a,b){for(b%=$a.length;b--;)$a.push($a.shift())}"
        assert classify(swap) is swap_at_offset
        assert classify(rotate) is rotate_left


class TestSplitEntries:
    def test_plain_entries(self) -> None:
        body = (
            "AB:function(a){a.reverse()},\n"
            "cd:function(a,b){a.splice(0,b)}"
        )
        assert list(split_entries(body)) == [
            ("AB", "function(a){a.reverse()}"),
            ("cd", "function(a,b){a.splice(0,b)}"),
        ]

    def test_quoted_keys_and_repeated_separators(self) -> None:
        body = '"AB":function(a){a.reverse()},,\n  cd:function(a,b){a.splice(0,b)}'
        names = [name for name, _ in split_entries(body)]
        assert names == ["AB", "cd"]

    def test_arrow_entries(self) -> None:
        body = "ab:(a,b)=>{a.splice(0,b)},Cd:(a)=>{a.reverse()}"
        assert [name for name, _ in split_entries(body)] == ["ab", "Cd"]

    def test_empty_body(self) -> None:
        assert list(split_entries("")) == []


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class TestBuildOperationTable:
    _BODY = (
        "AB:function(a){a.reverse()},\n"
        "cd:function(a,b){a.splice(0,b)},\n"
        "Ef:function(a,b){var c=a[0];a[0]=a[b%a.length];a[b%a.length]=c}"
    )

    def test_maps_every_entry(self) -> None:
        table = build_operation_table(self._BODY)
        assert dict(table) == {
            "AB": reverse,
            "cd": drop_prefix,
            "Ef": swap_at_offset,
        }

    def test_table_is_read_only(self) -> None:
        table = build_operation_table(self._BODY)
        with pytest.raises(TypeError):
            table["zz"] = reverse  # type: ignore[index]

    def test_unknown_entries_are_left_out(self) -> None:
        body = self._BODY + ",\nGh:function(a){return a.length}"
        table = build_operation_table(body)
        assert "Gh" not in table
        assert len(table) == 3

    def test_nothing_recognised_raises(self) -> None:
        with pytest.raises(ExtractionFailed) as exc_info:
            build_operation_table("Gh:function(a){return a.length}")
        assert exc_info.value.role == "helper-body"

    def test_dollar_temp_swap_is_kept(self) -> None:
        table = build_operation_table(
            "AB:function(a,b){var $c=a[0];a[0]=a[b%a.length];a[b%a.length]=$c}"
        )
        assert dict(table) == {"AB": swap_at_offset}
