"""
End-to-end tests for tunnel nodes over loopback.
"""
import threading

import pytest

from udptun.fakes import FakeInterface
from udptun.networking.errors import SetupError
from udptun.networking.relay import RelayLoop
from udptun.node import TunnelNode
from udptun.utils.config import TunnelSettings


def make_node(**kwargs):
    settings = TunnelSettings("tun0", bind_address="127.0.0.1", local_port=0, **kwargs)
    return TunnelNode(settings, interface_factory=FakeInterface)


@pytest.fixture
def nodes():
    created = []

    def _make(**kwargs):
        node = make_node(**kwargs)
        created.append(node)
        return node

    yield _make
    for node in created:
        node.stop()


def test_server_and_client_nodes_tunnel_frames(nodes):
    server = nodes()
    server.start()
    server.socket.settimeout(5)
    server_port = server.socket.getsockname()[1]

    thread = threading.Thread(target=server.handshake, daemon=True)
    thread.start()

    client = nodes(server_address="127.0.0.1", port=server_port)
    client.start()
    client.socket.settimeout(5)
    assert client.handshake() == ("127.0.0.1", server_port)
    thread.join(timeout=5)

    assert server.session.peer_address == client.socket.getsockname()

    client.interface.inject(b"\x45" + bytes(59))
    RelayLoop(client.session).step()
    RelayLoop(server.session).step()
    assert server.interface.collect() == b"\x45" + bytes(59)

    status = server.status()
    assert status["role"] == "server"
    assert status["established"] is True
    assert status["stats"]["frames_from_peer"] == 1


def test_status_before_start(nodes):
    status = nodes(server_address="127.0.0.1").status()
    assert status["role"] == "client"
    assert status["interface"] == "tun0"
    assert status["established"] is False
    assert status["peer_address"] is None


def test_handshake_before_start_is_refused(nodes):
    with pytest.raises(SetupError):
        nodes().handshake()


def test_socket_failure_releases_interface():
    def failing_socket(role, bind_address, port):
        raise SetupError("bind failed")

    settings = TunnelSettings("tun0", local_port=0)
    node = TunnelNode(settings, interface_factory=FakeInterface, socket_factory=failing_socket)

    with pytest.raises(SetupError):
        node.start()
    assert node.interface is None
    assert node.session is None


def test_unresolvable_server_is_setup_error(nodes):
    node = nodes(server_address="no-such-host.invalid")
    with pytest.raises(SetupError):
        node.start()
