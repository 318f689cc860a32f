"""
Session state shared by the handshake and the relay loop.
"""
import enum
import time
import logging
from typing import Dict, Any, Optional, Tuple

Address = Tuple[str, int]


class Role(enum.Enum):
    """Which side of the handshake this process plays"""
    CLIENT = "client"
    SERVER = "server"


class PeerPolicy(enum.Enum):
    """How the relay loop treats the source address of incoming datagrams"""
    FIXED = "fixed"
    ROAMING = "roaming"


class SessionStats:
    """Per-direction counters for the relay"""

    def __init__(self):
        self.frames_to_peer = 0
        self.frames_from_peer = 0
        self.bytes_to_peer = 0
        self.bytes_from_peer = 0
        self.errors = 0
        self.peer_changes = 0
        self.established_at: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "frames_to_peer": self.frames_to_peer,
            "frames_from_peer": self.frames_from_peer,
            "bytes_to_peer": self.bytes_to_peer,
            "bytes_from_peer": self.bytes_from_peer,
            "errors": self.errors,
            "peer_changes": self.peer_changes,
            "established_at": self.established_at,
        }


class Session:
    """
    The single stateful entity of a running tunnel.

    Owns the virtual interface and the UDP socket for the process lifetime.
    ``peer_address`` is unset until the handshake calls ``establish()`` and
    afterwards can only move through ``update_peer()``.
    """

    def __init__(self, role: Role, interface, sock, token: str,
                 peer_policy: PeerPolicy = PeerPolicy.ROAMING):
        """
        Initialize the session

        Args:
            role: Role.CLIENT or Role.SERVER
            interface: Virtual interface handle (read_frame/write_frame/fileno)
            sock: Bound UDP socket
            token: Shared handshake token
            peer_policy: PeerPolicy.FIXED or PeerPolicy.ROAMING
        """
        if interface is None or sock is None:
            raise ValueError("Session requires an open interface and socket")

        self.role = role
        self.interface = interface
        self.socket = sock
        self.token = token
        self.peer_policy = peer_policy
        self.peer_address: Optional[Address] = None
        self.stats = SessionStats()
        self.logger = logging.getLogger("udptun.session")

    @property
    def established(self) -> bool:
        return self.peer_address is not None

    def establish(self, peer_address: Address) -> None:
        """
        Record the peer confirmed by the handshake

        Args:
            peer_address: (host, port) of the authoritative remote endpoint
        """
        if self.established:
            raise RuntimeError(f"Session already established with {self.peer_address}")

        self.peer_address = peer_address
        self.stats.established_at = time.time()
        self.logger.info(f"Session established with {peer_address[0]}:{peer_address[1]}")

    def update_peer(self, source: Address) -> bool:
        """
        Follow the peer to a new source address under the roaming policy

        Args:
            source: Source address of the datagram just received

        Returns:
            True if the current peer address changed
        """
        if not self.established:
            raise RuntimeError("Cannot update peer before the handshake completes")

        if self.peer_policy is not PeerPolicy.ROAMING or source == self.peer_address:
            return False

        self.logger.info(f"Peer moved from {self.peer_address[0]}:{self.peer_address[1]} "
                         f"to {source[0]}:{source[1]}")
        self.peer_address = source
        self.stats.peer_changes += 1
        return True

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the session for status reporting"""
        peer = None
        if self.peer_address:
            peer = f"{self.peer_address[0]}:{self.peer_address[1]}"

        return {
            "role": self.role.value,
            "peer_address": peer,
            "peer_policy": self.peer_policy.value,
            "established": self.established,
            "stats": self.stats.as_dict(),
        }
