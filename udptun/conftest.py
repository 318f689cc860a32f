"""
Shared test fixtures.
"""
import pytest

from udptun.fakes import FakeInterface, udp_socket
from udptun.networking.session import Session, Role, PeerPolicy
from udptun.networking.handshake import HANDSHAKE_TOKEN


@pytest.fixture
def make_session(request):
    """Build sessions on loopback sockets; everything is closed after the test"""

    def _make(role=Role.SERVER, peer_policy=PeerPolicy.ROAMING, interface=None):
        interface = (interface or FakeInterface()).open()
        sock = udp_socket()
        request.addfinalizer(interface.close)
        request.addfinalizer(sock.close)
        return Session(role, interface, sock, HANDSHAKE_TOKEN, peer_policy=peer_policy)

    return _make


@pytest.fixture
def peer_socket(request):
    """A plain loopback UDP socket acting as the remote end"""

    def _make():
        sock = udp_socket()
        request.addfinalizer(sock.close)
        return sock

    return _make
