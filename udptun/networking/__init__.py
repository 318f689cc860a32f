"""
Networking package for the UDP tunnel.
Includes the session state, token handshake and relay loop.
"""

from udptun.networking.errors import TunnelError, SetupError, HandshakeError, RelayError
from udptun.networking.session import Session, SessionStats, Role, PeerPolicy
from udptun.networking.handshake import HANDSHAKE_TOKEN, perform_handshake
from udptun.networking.relay import RelayLoop
from udptun.networking.transport import open_socket, resolve_peer

__all__ = [
    'TunnelError',
    'SetupError',
    'HandshakeError',
    'RelayError',
    'Session',
    'SessionStats',
    'Role',
    'PeerPolicy',
    'HANDSHAKE_TOKEN',
    'perform_handshake',
    'RelayLoop',
    'open_socket',
    'resolve_peer'
]
