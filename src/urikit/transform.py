"""urikit.transform
Component-level helpers: turn whatever the caller has into UriComponents, and return edited copies of it.
Nothing here mutates its input.
"""

import dataclasses

from collections.abc import Mapping
from typing import Any, AbstractSet

from multidict import MultiDict

from .domain import DEFAULT_TLDS, get_subdomain, set_subdomain
from .errors import MissingHost, UnsupportedInput
from .parse import UriComponents, UserInfo, parse_uri
from .query import MergeMode, QueryInput, encode_query, merge_query, to_query_params

ComponentsInput = UriComponents | str | bytes | Mapping[str, Any]

_FIELDS: frozenset[str] = frozenset(f.name for f in dataclasses.fields(UriComponents))

_STR_FIELDS: frozenset[str] = frozenset(("scheme", "authority", "host", "path", "query", "fragment"))

_USER_INFO_FIELDS: frozenset[str] = frozenset(f.name for f in dataclasses.fields(UserInfo))

_DEFAULT_ENCODING: str = "ascii"


def _check_str_fields(value: Mapping[str, Any], names: AbstractSet[str], what: str) -> None:
    for name in sorted(names & set(value)):
        if value[name] is not None and not isinstance(value[name], str):
            raise UnsupportedInput(f"{what} {name} must be a string, got {type(value[name]).__name__}")


def _user_info_from_mapping(value: Mapping[str, Any]) -> UserInfo:
    unknown: set[str] = set(value) - _USER_INFO_FIELDS
    if len(unknown) > 0:
        raise UnsupportedInput(f"unknown userinfo field(s): {', '.join(sorted(map(str, unknown)))}")
    _check_str_fields(value, _USER_INFO_FIELDS, "userinfo")
    return UserInfo(**value)


def _components_from_mapping(value: Mapping[str, Any]) -> UriComponents:
    unknown: set[str] = set(value) - _FIELDS
    if len(unknown) > 0:
        raise UnsupportedInput(f"unknown URI component(s): {', '.join(sorted(map(str, unknown)))}")
    _check_str_fields(value, _STR_FIELDS, "component")
    fields: dict[str, Any] = dict(value)
    user_info: Any = fields.get("user_info")
    if isinstance(user_info, Mapping):
        fields["user_info"] = _user_info_from_mapping(user_info)
    elif user_info is not None and not isinstance(user_info, UserInfo):
        raise UnsupportedInput(f"can't use {type(user_info).__name__} as user_info")
    fields["is_urn"] = bool(fields.get("is_urn", False))
    return UriComponents(**fields)


def to_components(value: ComponentsInput) -> UriComponents:
    """Accepts UriComponents (returned as-is), a string or ASCII bytes (parsed),
    or a mapping of component names to values, where user_info may itself be a mapping.
    """
    if isinstance(value, UriComponents):
        return value
    if isinstance(value, str):
        return parse_uri(value)
    if isinstance(value, bytes):
        try:
            return parse_uri(value.decode(_DEFAULT_ENCODING))
        except UnicodeDecodeError as e:
            raise UnsupportedInput(f"URI bytes must be {_DEFAULT_ENCODING}") from e
    if isinstance(value, Mapping):
        return _components_from_mapping(value)
    raise UnsupportedInput(f"can't convert {type(value).__name__} to URI components")


def _require_host(components: UriComponents) -> str:
    if components.host is None:
        raise MissingHost(f"{components.serialize()!r} has no host")
    return components.host


def _with_new_host(components: UriComponents, host: str) -> UriComponents:
    # Keep a present authority in step with the decomposed fields.
    result: UriComponents = components.replace(host=host)
    if result.authority is not None:
        result = result.replace(authority=result.authority_text())
    return result


def with_host(value: ComponentsInput, host: str) -> UriComponents:
    components: UriComponents = to_components(value)
    _require_host(components)
    return _with_new_host(components, host)


def with_path(value: ComponentsInput, path: str | None) -> UriComponents:
    return to_components(value).replace(path=path)


def subdomain_of(value: ComponentsInput, tlds: AbstractSet[str] = DEFAULT_TLDS) -> str:
    return get_subdomain(_require_host(to_components(value)), tlds)


def with_subdomain(value: ComponentsInput, subdomain: str, tlds: AbstractSet[str] = DEFAULT_TLDS) -> UriComponents:
    """with_subdomain("http://sub.example.com", "blog").host == "blog.example.com" """
    components: UriComponents = to_components(value)
    return _with_new_host(components, set_subdomain(_require_host(components), subdomain, tlds))


def with_query_params(value: ComponentsInput, params: QueryInput, mode: MergeMode = "replace") -> UriComponents:
    """Merges params into the query of value.
    The whole query is decoded with parse_qsl and re-encoded with urlencode, so the existing query isn't kept
    byte-for-byte: "flag&a=%20" comes back as "flag=&a=+". With no params to merge, value is returned unchanged.
    """
    components: UriComponents = to_components(value)
    incoming: MultiDict[str] = to_query_params(params)
    if len(incoming) == 0:
        return components
    merged: MultiDict[str] = merge_query(to_query_params(components.query or ""), incoming, mode)
    return components.replace(query=encode_query(merged))
