"""Endpoint value object: an absolute URL plus its query parameters."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit


@dataclass(frozen=True)
class Endpoint:
    """Immutable reference to a REST resource.

    The query string is kept apart from the URL so that pagination can
    rewrite ``start`` without re-parsing. Parameters are stored as
    ordered pairs so the value stays hashable; ``params`` hands out a copy.
    Every modifier returns a new Endpoint.
    """

    url: str
    query: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def parse(cls, url: str) -> "Endpoint":
        """Split ``url`` into its base URL and query parameters."""
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query, keep_blank_values=True))
        base = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        return cls(base, tuple(params.items()))

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.query)

    @property
    def site(self) -> str:
        """Scheme and authority, e.g. ``https://user:pw@stash.example.com``."""
        parts = urlsplit(self.url)
        return urlunsplit((parts.scheme, parts.netloc, "", "", ""))

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def userinfo(self) -> Optional[str]:
        netloc = urlsplit(self.url).netloc
        if "@" not in netloc:
            return None
        return netloc.rpartition("@")[0]

    def join(self, reference: str) -> "Endpoint":
        """Resolve ``reference`` against this endpoint (RFC 3986).

        The result carries no query parameters unless ``reference`` has some.
        """
        return Endpoint.parse(urljoin(self.url, reference))

    def with_params(self, **params: Any) -> "Endpoint":
        merged = dict(self.params)
        merged.update(params)
        return Endpoint(self.url, tuple(merged.items()))

    def with_userinfo(self, credentials: Optional[str]) -> "Endpoint":
        """Return a copy whose authority carries ``credentials`` (or none)."""
        parts = urlsplit(self.url)
        hostport = parts.netloc.rpartition("@")[2]
        netloc = f"{credentials}@{hostport}" if credentials else hostport
        url = urlunsplit((parts.scheme, netloc, parts.path, "", ""))
        return Endpoint(url, self.query)

    def redacted(self) -> str:
        """String form with any password in the user-info masked."""
        userinfo = self.userinfo
        if userinfo is None:
            return str(self)
        user, sep, _ = userinfo.partition(":")
        masked = f"{user}:***" if sep else user
        return str(self.with_userinfo(masked))

    def __str__(self) -> str:
        if not self.query:
            return self.url
        return f"{self.url}?{urlencode(self.query)}"
