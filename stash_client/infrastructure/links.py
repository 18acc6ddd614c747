"""Accessors for the self-link embedded in fetched entities.

Servers from the 2.x line and later publish ``links.self[0].href``; older
ones publish ``link.url``. Either way the client only needs the path.
"""

from typing import Any, Callable, Dict
from urllib.parse import urlsplit


def links_self_href(entity: Dict[str, Any]) -> str:
    return entity["links"]["self"][0]["href"]


def link_url(entity: Dict[str, Any]) -> str:
    return entity["link"]["url"]


LINK_STYLES: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "links": links_self_href,
    "link": link_url,
}


def link_path(href: str) -> str:
    """Drop scheme and authority from ``href``, keeping only its path."""
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return parts.path
    return href


def self_link(entity: Dict[str, Any], style: str = "links") -> str:
    """Return the path of ``entity``'s self-link.

    Args:
        entity: Project, repository or commit as returned by the server
        style: Key into ``LINK_STYLES``

    Raises:
        KeyError: If the entity carries no link of the given style
    """
    return link_path(LINK_STYLES[style](entity))
