import socket
from collections.abc import Generator
from unittest.mock import Mock, patch

import pytest

from conftest import sockets_without_route
from liveearth.composite.connectivity import (
    AlwaysOnline,
    Connectivity,
    SocketConnectivity,
    create_connectivity,
)
from liveearth.errors import NetworkError


@pytest.fixture(autouse=True)
def no_proxy() -> Generator[Mock, None, None]:
    with patch(
        "liveearth.composite.connectivity.get_environ_proxies", return_value={}
    ) as mock_proxies:
        yield mock_proxies


def test_factory() -> None:
    assert isinstance(create_connectivity(), SocketConnectivity)
    assert isinstance(create_connectivity(precheck=False), AlwaysOnline)
    assert isinstance(AlwaysOnline(), Connectivity)


def test_offline_when_no_route() -> None:
    with patch("liveearth.composite.connectivity.socket.socket") as mock_socket:
        mock_socket.return_value.__enter__.return_value.connect.side_effect = OSError(
            "Network is unreachable"
        )
        assert SocketConnectivity().is_online() is False
    assert mock_socket.call_count == 2


def test_online_when_route_exists() -> None:
    with patch("liveearth.composite.connectivity.socket.socket") as mock_socket:
        assert SocketConnectivity().is_online() is True
        mock_socket.return_value.__enter__.return_value.connect.assert_called_once_with(
            ("8.8.8.8", 53)
        )


def test_online_over_ipv6_only() -> None:
    with patch(
        "liveearth.composite.connectivity.socket.socket",
        side_effect=sockets_without_route(socket.AF_INET),
    ) as mock_socket:
        assert SocketConnectivity().is_online() is True

    families = [c.args[0] for c in mock_socket.call_args_list]
    assert families == [socket.AF_INET, socket.AF_INET6]


def test_offline_when_no_family_has_a_route() -> None:
    with patch(
        "liveearth.composite.connectivity.socket.socket",
        side_effect=sockets_without_route(socket.AF_INET, socket.AF_INET6),
    ):
        assert SocketConnectivity().is_online() is False


def test_proxy_skips_route_check(no_proxy: Mock) -> None:
    no_proxy.return_value = {"https": "http://proxy.internal:3128"}
    with patch("liveearth.composite.connectivity.socket.socket") as mock_socket:
        assert SocketConnectivity().is_online("https://daynight.sdmn.eu/api/v1/composite")

    mock_socket.assert_not_called()
    no_proxy.assert_called_once_with("https://daynight.sdmn.eu/api/v1/composite")


def test_proxy_skips_endpoint_resolution(no_proxy: Mock) -> None:
    no_proxy.return_value = {"https": "http://proxy.internal:3128"}
    with patch("liveearth.composite.connectivity.socket.getaddrinfo") as mock_gai:
        SocketConnectivity().check_endpoint("daynight.sdmn.eu")
    mock_gai.assert_not_called()


def test_unresolvable_endpoint() -> None:
    with patch(
        "liveearth.composite.connectivity.socket.getaddrinfo",
        side_effect=socket.gaierror(-2, "Name or service not known"),
    ):
        with pytest.raises(NetworkError) as exc_info:
            SocketConnectivity().check_endpoint("daynight.sdmn.eu")

    assert exc_info.value.kind == "dns"
    assert exc_info.value.message.startswith("Cannot resolve daynight.sdmn.eu")


def test_resolvable_endpoint() -> None:
    with patch("liveearth.composite.connectivity.socket.getaddrinfo") as mock_gai:
        SocketConnectivity().check_endpoint("daynight.sdmn.eu")
    assert mock_gai.call_args.args[:2] == ("daynight.sdmn.eu", 443)


def test_always_online_never_objects() -> None:
    checker = AlwaysOnline()
    assert checker.is_online()
    checker.check_endpoint("unresolvable.invalid")
