"""urikit.query
Merging query parameters held in multidict's ordered multi-maps.
Decoding and encoding are left to urllib.parse.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Literal
from urllib.parse import parse_qsl, urlencode

from multidict import MultiDict, MultiDictProxy, MultiMapping

from .errors import UnsupportedInput

MergeMode = Literal["replace", "append"]

MERGE_MODES: tuple[MergeMode, ...] = ("replace", "append")

QueryInput = MultiMapping[str] | str | Mapping[str, Any] | Iterable[tuple[str, Any]]


def merge_query(a: MultiMapping[str], b: MultiMapping[str], mode: MergeMode = "replace") -> MultiDict[str]:
    """Returns a new multi-map holding a's entries followed by b's, in order.
    In "replace" mode every key that appears in b is dropped from a first, so b's values (all of them) win.
    In "append" mode nothing is dropped.
    Neither a nor b is modified.
    """
    if mode not in MERGE_MODES:
        raise UnsupportedInput(f"unknown merge mode {mode!r}, expected one of {MERGE_MODES}")
    result: MultiDict[str] = MultiDict(a)
    incoming: list[tuple[str, str]] = list(b.items())
    if mode == "replace":
        for key in {key for key, _ in incoming}:
            result.popall(key, None)
    result.extend(incoming)
    return result


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise UnsupportedInput(f"can't use {type(value).__name__} as a query value")


def to_query_params(value: QueryInput) -> MultiDict[str]:
    """Converts value into a MultiDict.
    - A MultiDict is returned as-is; any other multi-map is copied.
    - A string is decoded with parse_qsl. A leading "?" is ignored, and blank values are kept.
    - In a mapping, list and tuple values become repeated keys, and None values are skipped.
    - An iterable of (key, value) pairs keeps its order and duplicates.
    """
    if isinstance(value, MultiDict):
        return value
    if isinstance(value, (MultiDictProxy, MultiMapping)):
        return MultiDict(value)
    if isinstance(value, str):
        return MultiDict(parse_qsl(value.removeprefix("?"), keep_blank_values=True))
    if isinstance(value, (bytes, bytearray)):
        raise UnsupportedInput("bytes can't be used as query parameters; decode them first")

    result: MultiDict[str] = MultiDict()
    if isinstance(value, Mapping):
        for key, item in value.items():
            for v in item if isinstance(item, (list, tuple)) else (item,):
                if v is not None:
                    result.add(str(key), _query_value(v))
        return result
    if isinstance(value, Iterable):
        for pair in value:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise UnsupportedInput(f"expected (key, value) pairs, got {pair!r}")
            if pair[1] is not None:
                result.add(str(pair[0]), _query_value(pair[1]))
        return result
    raise UnsupportedInput(f"unsupported query parameters type {type(value).__name__}")


def merge_query_params(a: QueryInput, b: QueryInput, mode: MergeMode = "replace") -> MultiDict[str]:
    return merge_query(to_query_params(a), to_query_params(b), mode)


def encode_query(params: MultiMapping[str]) -> str:
    """encode_query(MultiDict([("a", "1"), ("a", "2 3")])) == "a=1&a=2+3" """
    return urlencode(list(params.items()))
