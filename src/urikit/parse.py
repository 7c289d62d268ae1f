"""urikit.parse
Generic-syntax URI parsing, serialization and reference resolution.
Components are split the way RFC 3986 appendix B splits them; the characters inside each component are not validated.
"""

import dataclasses
import logging
import re

from typing import Any, Self

from .errors import MalformedUri, MissingHost, UnsupportedInput

logger = logging.getLogger(__name__)

# Characters that end each component (RFC 3986 appendix B).
_SCHEME_END: str = ":/?#"
_AUTHORITY_END: str = "/?#"
_PATH_END: str = "?#"

# IP-literal = "[" address "]" [ ":" port ]
# Only the brackets are checked; the address is taken as-is.
_IP_LITERAL_PAT: re.Pattern[str] = re.compile(r"\[(?P<host>[^\[\]]+)\](?::(?P<port>.*))?", re.DOTALL)

# port = 1*DIGIT
_PORT_PAT: re.Pattern[str] = re.compile(r"[0-9]+")

# segment = [ "/" ] *( any character but "/" )
_FIRST_SEGMENT_PAT: re.Pattern[str] = re.compile(r"/?[^/]*")


@dataclasses.dataclass(frozen=True)
class UserInfo:
    username: str | None = None
    password: str | None = None


@dataclasses.dataclass(frozen=True)
class UriComponents:
    """An immutable URI reference, split into its components.
    Use parse_uri to build one from a string, or pass the fields you need as keyword arguments.
    Every field is optional. is_urn is derived from the scheme by parse_uri, but is taken as given otherwise.
    """

    scheme: str | None = None
    authority: str | None = None
    user_info: UserInfo | None = None
    host: str | None = None
    port: int | None = None
    path: str | None = None
    query: str | None = None
    fragment: str | None = None
    is_urn: bool = False

    def __post_init__(self: Self) -> None:
        if self.host is None:
            if self.authority is not None:
                raise MissingHost(f"authority {self.authority!r} has no host")
            if self.user_info is not None:
                raise MissingHost("userinfo can't be set without a host")
        if self.port is not None and (isinstance(self.port, bool) or not isinstance(self.port, int)):
            raise UnsupportedInput(f"port must be an int, got {type(self.port).__name__}")
        if self.port is not None and self.port < 0:
            raise MalformedUri(f"port must be non-negative, got {self.port}")

    def authority_text(self: Self) -> str | None:
        """userinfo@host:port, rebuilt from the decomposed fields.
        IPv6 hosts (anything containing a colon) get their brackets back.
        """
        if self.host is None:
            return None
        result: str = ""
        if self.user_info is not None:
            if self.user_info.username is not None:
                result += self.user_info.username
                if self.user_info.password is not None:
                    result += f":{self.user_info.password}"
            result += "@"
        result += f"[{self.host}]" if ":" in self.host else self.host
        if self.port is not None:
            result += f":{self.port}"
        return result

    def replace(self: Self, **changes: Any) -> Self:
        return dataclasses.replace(self, **changes)

    def serialize(self: Self) -> str:
        return unparse_uri(self)

    def join(self: Self, ref: "UriComponents | str", strict: bool = True) -> "UriComponents":
        return resolve_uri(self, ref, strict=strict)


def _find_first(data: str, delimiters: str) -> int:
    """Returns the index of the first delimiter in data, or len(data) if there isn't one."""
    return next((i for i, c in enumerate(data) if c in delimiters), len(data))


def _scan_scheme(data: str) -> tuple[str | None, str]:
    """scheme = 1*( any character but ":" / "/" / "?" / "#" ) followed by ":" """
    end: int = _find_first(data, _SCHEME_END)
    if 0 < end < len(data) and data[end] == ":":
        return data[:end], data[end + 1 :]
    return None, data


def _scan_authority(data: str) -> tuple[str | None, str]:
    """"//" authority, where authority runs up to the first "/", "?" or "#" """
    if not data.startswith("//"):
        return None, data
    data = data[len("//") :]
    end: int = _find_first(data, _AUTHORITY_END)
    return data[:end], data[end:]


def _scan_path(data: str) -> tuple[str, str]:
    end: int = _find_first(data, _PATH_END)
    return data[:end], data[end:]


def _scan_query(data: str) -> tuple[str | None, str]:
    if not data.startswith("?"):
        return None, data
    query, hash_sign, rest = data[1:].partition("#")
    return query, hash_sign + rest


def _scan_fragment(data: str) -> tuple[str | None, str]:
    if not data.startswith("#"):
        return None, data
    return data[1:], ""


def _parse_port(raw_port: str | None) -> int | None:
    # Anything that isn't a plain decimal number counts as no port at all.
    if raw_port is None or _PORT_PAT.fullmatch(raw_port) is None:
        return None
    return int(raw_port, base=10)


def _split_host_port(hostport: str) -> tuple[str, int | None]:
    m: re.Match[str] | None = _IP_LITERAL_PAT.fullmatch(hostport)
    if m is not None:
        return m["host"], _parse_port(m["port"])
    if hostport.startswith("["):
        raise MalformedUri(f"unbalanced IP literal in {hostport!r}")
    host, colon, raw_port = hostport.rpartition(":")
    if len(colon) == 0:
        return hostport, None
    return host, _parse_port(raw_port)


def _split_authority(authority: str) -> tuple[UserInfo | None, str, int | None]:
    """authority = [ userinfo "@" ] host [ ":" port ]
    The userinfo ends at the last "@", and the username ends at the first ":" of the userinfo.
    """
    if _IP_LITERAL_PAT.fullmatch(authority) is not None:
        return (None, *_split_host_port(authority))
    userinfo, at, hostport = authority.rpartition("@")
    user_info: UserInfo | None = None
    if len(at) > 0:
        username, colon, password = userinfo.partition(":")
        user_info = UserInfo(username=username, password=password if len(colon) > 0 else None)
    return (user_info, *_split_host_port(hostport))


def parse_uri(data: str) -> UriComponents:
    """Splits a URI reference into its components.
    URI-reference = [ scheme ":" ] [ "//" authority ] path [ "?" query ] [ "#" fragment ]
    An empty path comes back as None. An empty authority ("file:///etc") comes back as an empty host.
    """
    if not isinstance(data, str):
        raise UnsupportedInput(f"can't parse {type(data).__name__} as a URI")

    scheme, rest = _scan_scheme(data)
    authority, rest = _scan_authority(rest)
    path, rest = _scan_path(rest)
    query, rest = _scan_query(rest)
    fragment, rest = _scan_fragment(rest)
    if len(rest) > 0:
        raise MalformedUri(f"trailing data {rest!r} in {data!r}")

    user_info: UserInfo | None = None
    host: str | None = None
    port: int | None = None
    if authority is not None:
        user_info, host, port = _split_authority(authority)

    return UriComponents(
        scheme=scheme,
        authority=authority,
        user_info=user_info,
        host=host,
        port=port,
        path=path if len(path) > 0 else None,
        query=query,
        fragment=fragment,
        is_urn=scheme is not None and scheme.lower() == "urn",
    )


def unparse_uri(components: UriComponents) -> str:
    """Renders components back into a string. Absent fields contribute nothing.
    For a URN the path is written out as-is, right after the scheme.
    Otherwise a "/" is put between the authority (or scheme) and a path that doesn't already have one.
    """
    result: str = ""
    if components.scheme is not None:
        result += f"{components.scheme}:"
    if components.is_urn:
        result += components.path or ""
    else:
        authority: str | None = components.authority_text()
        if authority is not None:
            result += f"//{authority}"
        if components.path:
            if len(result) > 0 and not result.endswith("/") and not components.path.startswith("/"):
                result += "/"
            result += components.path
    if components.query is not None:
        result += f"?{components.query}"
    if components.fragment is not None:
        result += f"#{components.fragment}"
    return result


def remove_dot_segments(path: str | None) -> str:
    """Implementation of the "remove_dot_segments" routine from RFC 3986 section 5.2.4"""
    path = path or ""
    result: str = ""
    while len(path) > 0:
        if path.startswith("../") or path.startswith("./"):
            path = path[path.index("/") + 1 :]
        elif path.startswith("/./") or path == "/.":
            path = "/" + path[len("/./") :]
        elif path.startswith("/../") or path == "/..":
            path = "/" + path[len("/../") :]
            result = result[: max(result.rfind("/"), 0)]
        elif path in (".", ".."):
            path = ""
        else:
            segment: str = _FIRST_SEGMENT_PAT.match(path)[0]
            result += segment
            path = path[len(segment) :]
    return result


def _coerce(value: UriComponents | str) -> UriComponents:
    if isinstance(value, UriComponents):
        return value
    return parse_uri(value)


def resolve_uri(base: UriComponents | str, ref: UriComponents | str, strict: bool = True) -> UriComponents:
    """Implementation of the "Transform References" algorithm from RFC 3986 section 5.2.2.
    The merge step keeps the base path up to and including its last "/".
    With strict=False, a reference whose scheme matches the base's is treated as if it had no scheme (RFC 3986 section 5.4.2).
    The result is never a URN, and it never inherits the base's fragment.
    """
    base = _coerce(base)
    ref = _coerce(ref)

    scheme: str | None
    authority: str | None
    user_info: UserInfo | None
    host: str | None
    port: int | None
    path: str | None
    query: str | None

    ref_scheme: str | None = ref.scheme
    if not strict and ref_scheme is not None and base.scheme is not None and ref_scheme.lower() == base.scheme.lower():
        ref_scheme = None

    if ref_scheme is not None:
        branch: str = "scheme"
        scheme = ref_scheme
        authority, user_info, host, port = ref.authority, ref.user_info, ref.host, ref.port
        path = remove_dot_segments(ref.path)
        query = ref.query
    elif ref.authority is not None:
        branch = "authority"
        scheme = base.scheme
        authority, user_info, host, port = ref.authority, ref.user_info, ref.host, ref.port
        path = remove_dot_segments(ref.path)
        query = ref.query
    else:
        scheme = base.scheme
        authority, user_info, host, port = base.authority, base.user_info, base.host, base.port
        if not ref.path:
            branch = "same-path"
            path = base.path
            query = ref.query if ref.query is not None else base.query
        elif ref.path.startswith("/"):
            branch = "absolute-path"
            path = remove_dot_segments(ref.path)
            query = ref.query
        else:
            branch = "relative-path"
            base_dir: str = (base.path or "")[: (base.path or "").rfind("/") + 1]
            path = remove_dot_segments(base_dir + ref.path)
            query = ref.query
    logger.debug("resolved %r against %r by %s", ref, base, branch)

    return UriComponents(
        scheme=scheme,
        authority=authority,
        user_info=user_info,
        host=host,
        port=port,
        path=path,
        query=query,
        fragment=ref.fragment,
        is_urn=False,
    )
