"""urikit.errors
Exceptions raised by urikit. All of them are ValueErrors.
"""


class UriError(ValueError):
    """Base class for every error raised by urikit."""


class MalformedUri(UriError):
    """The input can't be decomposed into URI components."""


class MissingHost(UriError):
    """The operation needs a host, and the components don't have one."""


class UnknownTld(UriError):
    """No suffix of the hostname is in the suffix table."""

    def __init__(self, host: str) -> None:
        super().__init__(f"top-level domain not found in host {host!r}")
        self.host: str = host


class UnsupportedInput(UriError, TypeError):
    """An adapter was handed a value it doesn't know how to convert."""
