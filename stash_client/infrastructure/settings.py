"""Client settings loaded from environment variables."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Connection settings for a Stash server.

    Read from ``STASH_URL`` or ``STASH_HOST``/``STASH_SCHEME``, with
    credentials from ``STASH_CREDENTIALS`` (``user:password``) or the
    ``STASH_USERNAME``/``STASH_PASSWORD`` pair.
    """

    url: Optional[str] = None
    host: Optional[str] = None
    scheme: Optional[str] = None
    credentials: Optional[str] = None
    link_style: str = "links"
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        credentials = os.getenv("STASH_CREDENTIALS")
        username = os.getenv("STASH_USERNAME")
        if credentials is None and username:
            password = os.getenv("STASH_PASSWORD", "")
            credentials = f"{quote(username, safe='')}:{quote(password, safe='')}"

        timeout = os.getenv("STASH_TIMEOUT")

        settings = cls(
            url=os.getenv("STASH_URL"),
            host=os.getenv("STASH_HOST"),
            scheme=os.getenv("STASH_SCHEME"),
            credentials=credentials,
            link_style=os.getenv("STASH_LINK_STYLE", "links"),
            timeout=float(timeout) if timeout else None,
        )

        if settings.credentials is None:
            logger.warning("No Stash credentials found. Using anonymous access.")
        return settings

    def client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``StashClient``, omitting unset values."""
        kwargs = {
            "url": self.url,
            "host": self.host,
            "scheme": self.scheme,
            "credentials": self.credentials,
            "link_style": self.link_style,
            "timeout": self.timeout,
        }
        return {key: value for key, value in kwargs.items() if value is not None}
