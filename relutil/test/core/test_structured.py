from __future__ import annotations

from relutil.core.structured import (
    as_obj_list,
    as_str_dict,
    get_int,
    get_list,
    get_str,
    get_table,
    is_str_dict,
)


def test_is_str_dict() -> None:
    assert is_str_dict({"a": 1})
    assert is_str_dict({})
    assert not is_str_dict({1: "a"})
    assert not is_str_dict(["a"])


def test_as_helpers() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict("a") is None
    assert as_obj_list([1, "x"]) == [1, "x"]
    assert as_obj_list({"a": 1}) is None


def test_get_str_strips_and_rejects_blank() -> None:
    table: dict[str, object] = {"a": "  v1.0.0 ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "v1.0.0"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"n": 42, "flag": True, "s": "42"}
    assert get_int(table, "n") == 42
    assert get_int(table, "flag") is None
    assert get_int(table, "s") is None


def test_get_table_and_list() -> None:
    table: dict[str, object] = {"workspace": {"members": ["crates/*"]}, "x": 1}
    workspace = get_table(table, "workspace")
    assert workspace is not None
    assert get_list(workspace, "members") == ["crates/*"]
    assert get_table(table, "x") is None
    assert get_list(table, "x") is None
