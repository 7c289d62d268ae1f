__version__ = "0.1"

from .domain import DEFAULT_TLDS, get_subdomain, public_suffix_table, registrable_domain, set_subdomain
from .errors import MalformedUri, MissingHost, UnknownTld, UnsupportedInput, UriError
from .parse import UriComponents, UserInfo, parse_uri, remove_dot_segments, resolve_uri, unparse_uri
from .query import MERGE_MODES, MergeMode, encode_query, merge_query, merge_query_params, to_query_params
from .transform import subdomain_of, to_components, with_host, with_path, with_query_params, with_subdomain
