"""
=============================================================================
PARSED REQUEST TYPES
=============================================================================

The structured side of the framer: what a request looks like once the
bytes have been carved up.

    Raw bytes in ByteBuffer                    ParsedMessage
    ─────────────────────────                  ─────────────────────────
    GET /index.html HTTP/1.1\\r\\n   ──────►   method  = "GET"
                                               target  = "/index.html"
                                               version = "HTTP/1.1"
    Host: example.com\\r\\n          ──────►   headers = {"host": "example.com"}
    \\r\\n
    <Content-Length bytes>           ──────►   body    = b"..."

Everything here is immutable once built. A ParsedMessage is created by
the framer, handed to the dispatch handler, and then dropped.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class RequestLine:
    """
    The three tokens of the start line, verbatim.

    No percent-decoding and no method allow-list: any token is accepted
    as the method or the version.
    """

    method: str
    target: str
    version: str


class HeaderMap(Mapping[str, str]):
    """
    Immutable, case-insensitive header mapping.

    Keys are stored lower-cased, so lookups work with any casing:

        headers = HeaderMap([("Host", "example.com")])
        headers["host"]    # → "example.com"
        headers["HOST"]    # → "example.com"

    When a name repeats, the last occurrence wins.
    """

    __slots__ = ("_items",)

    def __init__(
        self,
        items: Union[Mapping[str, str], Iterable[Tuple[str, str]], None] = None,
    ):
        data: Dict[str, str] = {}
        if items is not None:
            pairs = items.items() if isinstance(items, Mapping) else items
            for name, value in pairs:
                data[name.lower()] = value
        self._items = data

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(frozenset(self._items.items()))

    def __repr__(self) -> str:
        return f"HeaderMap({self._items!r})"

    def to_dict(self) -> Dict[str, str]:
        """Plain dict copy (lower-cased keys)."""
        return dict(self._items)


@dataclass(frozen=True)
class ParsedMessage:
    """
    One complete request extracted from the byte stream.

    Attributes:
        method:  Request method token (e.g. "GET").
        target:  Opaque path + query string (e.g. "/search?q=1").
        version: Protocol token (e.g. "HTTP/1.1").
        headers: HeaderMap with lower-cased names.
        body:    Exactly Content-Length bytes, or b"" when there is none.
    """

    method: str
    target: str
    version: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""

    # How much of the body str() shows
    PREVIEW_LENGTH = 100

    @classmethod
    def from_parts(
        cls, request_line: RequestLine, headers: HeaderMap, body: bytes = b""
    ) -> "ParsedMessage":
        return cls(
            method=request_line.method,
            target=request_line.target,
            version=request_line.version,
            headers=headers,
            body=bytes(body),
        )

    @property
    def request_line(self) -> RequestLine:
        return RequestLine(self.method, self.target, self.version)

    @property
    def content_length(self) -> int:
        return len(self.body)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup with a default."""
        return self.headers.get(name, default)

    def __str__(self) -> str:
        snippet = self.body[: self.PREVIEW_LENGTH].decode("utf-8", errors="replace")
        return (
            f"ParsedMessage(method={self.method!r}, target={self.target!r}, "
            f"version={self.version!r}, headers={self.headers.to_dict()!r}, "
            f"body={snippet!r}...)"
        )
