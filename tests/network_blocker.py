from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

if TYPE_CHECKING:
    import pytest

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "testserver"})


def _is_blocked_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return bool(host) and host not in _LOCAL_HOSTS


def install_network_blocker(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail fast if a test lets an adapter reach a real routing backend."""
    import aiohttp

    def _aiohttp_block(self, method: str, url: Any, *args: Any, **kwargs: Any) -> Any:
        if _is_blocked_url(str(url)):
            msg = f"Blocked external host: {url}"
            raise RuntimeError(msg)
        return _orig_aiohttp_request(self, method, url, *args, **kwargs)

    _orig_aiohttp_request = aiohttp.ClientSession._request
    monkeypatch.setattr(aiohttp.ClientSession, "_request", _aiohttp_block, raising=True)
