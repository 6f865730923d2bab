"""Network reachability checks run before calling the compositor API."""

from __future__ import annotations

import logging
import socket
from typing import Final, Protocol, runtime_checkable

from requests.utils import get_environ_proxies

from liveearth.constants import DEFAULT_BASE_URL
from liveearth.errors import NetworkError

logger: Final = logging.getLogger(__name__)

# Any routable address works: a UDP "connect" only consults the routing table
ROUTE_CHECK_ADDRESSES: Final = (
    (socket.AF_INET, ("8.8.8.8", 53)),
    (socket.AF_INET6, ("2001:4860:4860::8888", 53)),
)


@runtime_checkable
class Connectivity(Protocol):
    """Protocol for advisory network checks."""

    def is_online(self, url: str = DEFAULT_BASE_URL) -> bool:
        """Return False when there is clearly no usable network path to ``url``."""
        ...

    def check_endpoint(self, host: str, port: int = 443) -> None:
        """Raise NetworkError when ``host`` cannot be resolved."""
        ...


class SocketConnectivity:
    """Checks based on the local routing table and the system resolver.

    When requests would send the call through a proxy (``HTTPS_PROXY`` and
    friends), the proxy does the routing and resolving, so both checks pass.
    """

    def __init__(
        self,
        addresses: tuple[tuple[int, tuple[str, int]], ...] = ROUTE_CHECK_ADDRESSES,
    ) -> None:
        self.addresses = addresses

    def is_online(self, url: str = DEFAULT_BASE_URL) -> bool:
        """Check for a route to the outside world without sending any packet.

        Args:
            url: Where the request is going, used to look up proxy settings

        Returns:
            False if no proxy applies and the OS reports every address
            family as unreachable
        """
        if _uses_proxy(url):
            logger.debug("connectivity: proxy configured for %s", url)
            return True

        for family, address in self.addresses:
            try:
                with socket.socket(family, socket.SOCK_DGRAM) as sock:
                    sock.connect(address)
            except OSError as exc:
                logger.debug("connectivity: no route to %s (%s)", address[0], exc)
                continue
            return True
        return False

    def check_endpoint(self, host: str, port: int = 443) -> None:
        """Resolve ``host`` so DNS failures get their own message.

        Raises:
            NetworkError: With ``kind="dns"`` when resolution fails
        """
        if _uses_proxy(f"https://{host}"):
            return
        try:
            socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as exc:
            logger.warning("Cannot resolve %s: %s", host, exc)
            raise NetworkError(
                f"Cannot resolve {host}. Please check your DNS settings or try again later.",
                exc,
                kind="dns",
            ) from exc


class AlwaysOnline:
    """Connectivity that never objects; the HTTP call reports real failures."""

    def is_online(self, url: str = DEFAULT_BASE_URL) -> bool:
        """Always return True.

        Returns:
            Always True
        """
        return True

    def check_endpoint(self, host: str, port: int = 443) -> None:
        return None


def _uses_proxy(url: str) -> bool:
    return bool(get_environ_proxies(url))


def create_connectivity(precheck: bool = True) -> Connectivity:
    """Create the connectivity checker.

    Args:
        precheck: False skips both checks entirely

    Returns:
        A Connectivity implementation
    """
    if not precheck:
        return AlwaysOnline()
    return SocketConnectivity()
