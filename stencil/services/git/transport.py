"""Network options for clone and fetch: credentials and proxy detection.

Authentication is best effort. Credentials come from git's own helper chain
(credential cache, store, or system keychain as configured by the user).
Interactive prompts are disabled so a missing credential fails the
retrieval instead of blocking it.
"""
import urllib.request
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import urlparse

from stencil.services.git.config_reader import GitConfigReader


@dataclass
class TransportOptions:
    """Environment and one-off git settings applied to network commands."""
    env: Dict[str, str] = field(default_factory=dict)
    config: Dict[str, str] = field(default_factory=dict)


def detect_proxy(url: str) -> Optional[str]:
    """Return the system proxy for ``url`` or None."""
    scheme = urlparse(url).scheme
    if scheme not in ("http", "https"):
        return None
    proxies = urllib.request.getproxies()
    host = urlparse(url).hostname or ""
    if host and urllib.request.proxy_bypass(host):
        return None
    return proxies.get(scheme) or proxies.get("all")


def make_transport_options(url: str, reader: Optional[GitConfigReader] = None) -> TransportOptions:
    """Build the options used for every network git command against ``url``."""
    reader = reader or GitConfigReader()
    options = TransportOptions(env={"GIT_TERMINAL_PROMPT": "0"})

    if reader.get_string("http.proxy") is None:
        proxy = detect_proxy(url)
        if proxy:
            options.config["http.proxy"] = proxy

    return options
