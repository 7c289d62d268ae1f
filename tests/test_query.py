import pytest

from multidict import MultiDict, MultiDictProxy

from urikit.errors import UnsupportedInput
from urikit.query import encode_query, merge_query, merge_query_params, to_query_params


def test_merge_replace():
    a = MultiDict([("x", "1"), ("y", "2")])
    b = MultiDict([("y", "3"), ("z", "4")])
    result = merge_query(a, b, "replace")
    assert list(result.items()) == [("x", "1"), ("y", "3"), ("z", "4")]
    assert result.getall("y") == ["3"]


def test_merge_append():
    a = MultiDict([("x", "1"), ("y", "2")])
    b = MultiDict([("y", "3"), ("z", "4")])
    result = merge_query(a, b, "append")
    assert list(result.items()) == [("x", "1"), ("y", "2"), ("y", "3"), ("z", "4")]
    assert result.getall("y") == ["2", "3"]


def test_merge_defaults_to_replace():
    assert merge_query(MultiDict(a="1"), MultiDict(a="2")).getall("a") == ["2"]


def test_merge_replace_keeps_all_incoming_duplicates():
    a = MultiDict([("a", "1"), ("b", "2"), ("b", "3")])
    b = MultiDict([("b", "4"), ("b", "5"), ("c", "6")])
    result = merge_query(a, b, "replace")
    assert list(result.items()) == [("a", "1"), ("b", "4"), ("b", "5"), ("c", "6")]


def test_merge_does_not_modify_inputs():
    a = MultiDict([("x", "1"), ("y", "2")])
    b = MultiDict([("y", "3")])
    result = merge_query(a, b, "replace")
    assert result is not a
    assert list(a.items()) == [("x", "1"), ("y", "2")]
    assert list(b.items()) == [("y", "3")]


def test_merge_accepts_proxies():
    a = MultiDictProxy(MultiDict(x="1"))
    result = merge_query(a, MultiDict(y="2"), "append")
    assert list(result.items()) == [("x", "1"), ("y", "2")]


def test_merge_unknown_mode():
    with pytest.raises(UnsupportedInput):
        merge_query(MultiDict(), MultiDict(), "prepend")


def test_to_query_params_returns_multidict_as_is():
    params = MultiDict(key="value")
    assert to_query_params(params) is params


def test_to_query_params_copies_proxies():
    params = MultiDict(key="value")
    result = to_query_params(MultiDictProxy(params))
    assert isinstance(result, MultiDict)
    assert result is not params
    assert result == params


@pytest.mark.parametrize("query", ["key=value&key2=value2", "?key=value&key2=value2"])
def test_to_query_params_from_string(query):
    result = to_query_params(query)
    assert result["key"] == "value"
    assert result["key2"] == "value2"


def test_to_query_params_decodes_and_keeps_blanks():
    result = to_query_params("a=1+2&b=&c=%26")
    assert list(result.items()) == [("a", "1 2"), ("b", ""), ("c", "&")]


def test_to_query_params_from_mapping():
    result = to_query_params({"key": ["value1", "value2"], "n": 123, "flag": True, "off": False})
    assert result.getall("key") == ["value1", "value2"]
    assert result["n"] == "123"
    assert result["flag"] == "true"
    assert result["off"] == "false"


def test_to_query_params_skips_none():
    result = to_query_params({"key": "value", "null_key": None, "list": ["a", None]})
    assert "null_key" not in result
    assert result.getall("list") == ["a"]


def test_to_query_params_from_pairs():
    result = to_query_params([("a", "1"), ("a", "2"), ("b", 3)])
    assert list(result.items()) == [("a", "1"), ("a", "2"), ("b", "3")]


@pytest.mark.parametrize("value", [42, None, b"a=1", [("a", "1", "extra")], {"a": object()}])
def test_to_query_params_unsupported(value):
    with pytest.raises(UnsupportedInput):
        to_query_params(value)


def test_merge_query_params_replace():
    assert encode_query(merge_query_params("a=1&b=2", "b=3&c=4", "replace")) == "a=1&b=3&c=4"
    assert encode_query(merge_query_params({"a": "1", "b": ["2", "3"]}, {"b": "4", "c": "5"})) == "a=1&b=4&c=5"


def test_merge_query_params_append():
    result = merge_query_params({"a": ["1", "2"], "b": "2"}, {"b": ["3", "4"], "c": "4"}, "append")
    assert encode_query(result) == "a=1&a=2&b=2&b=3&b=4&c=4"


def test_encode_query():
    assert encode_query(MultiDict([("a", "1"), ("a", "2 3"), ("q", "x&y")])) == "a=1&a=2+3&q=x%26y"
