"""
UDP socket setup for both tunnel roles.
"""
import socket
import logging
from typing import Tuple

from udptun.networking.errors import SetupError
from udptun.networking.session import Role, Address

logger = logging.getLogger("udptun.transport")


def resolve_peer(host: str, port: int) -> Address:
    """
    Resolve the configured server to an IPv4 (address, port) pair

    Args:
        host: Hostname or dotted-quad address
        port: UDP port

    Returns:
        (address, port) in the form recvfrom() reports sources
    """
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    except socket.gaierror as e:
        raise SetupError(f"Cannot resolve server address {host}: {e}") from e

    return infos[0][4][:2]


def open_socket(role: Role, bind_address: str, port: int) -> socket.socket:
    """
    Create the UDP socket used for the handshake and the relay

    The server binds to the listening port with SO_REUSEADDR; the client binds
    to the same port number locally, as the peer expects replies from it.

    Args:
        role: Role.CLIENT or Role.SERVER
        bind_address: Local address to bind ("0.0.0.0" for any)
        port: Local UDP port (0 picks an ephemeral port)

    Returns:
        The bound socket
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as e:
        raise SetupError(f"socket(): {e}") from e

    try:
        if role is Role.SERVER:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((bind_address, port))
    except OSError as e:
        sock.close()
        raise SetupError(f"Cannot bind UDP socket to {bind_address}:{port}: {e}") from e

    local: Tuple[str, int] = sock.getsockname()
    logger.info(f"{role.value.capitalize()} UDP socket bound to {local[0]}:{local[1]}")
    return sock
