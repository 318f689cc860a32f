"""
Token handshake that decides which remote address the tunnel talks to.

The server is the rendezvous point: it keeps listening until a datagram carrying
the exact token arrives and answers the sender. The client already knows the
server, so it sends the token once and only waits for a reply to prove liveness.
"""
import logging

from udptun.networking.errors import HandshakeError
from udptun.networking.session import Session, Role, Address

HANDSHAKE_TOKEN = "Wazaaaaaaaaaaahhhh !"

# Any UDP payload fits
RECV_SIZE = 65535

logger = logging.getLogger("udptun.handshake")


def encode_token(token: str) -> bytes:
    """
    Encode the token as it travels on the wire

    The terminating NUL is part of the datagram so both ends compare the
    same byte length.
    """
    return token.encode("ascii") + b"\x00"


def client_handshake(session: Session, server_address: Address,
                     strict: bool = False) -> Address:
    """
    Send the token to the server and wait for one reply

    Args:
        session: Session with a bound socket
        server_address: Configured (host, port) of the server
        strict: Reject a reply that does not carry the token

    Returns:
        The peer address recorded in the session (always server_address)
    """
    wire_token = encode_token(session.token)
    sock = session.socket

    try:
        sock.sendto(wire_token, server_address)
        logger.debug(f"Sent handshake token to {server_address[0]}:{server_address[1]}")
        reply, source = sock.recvfrom(RECV_SIZE)
    except OSError as e:
        raise HandshakeError(f"Handshake with {server_address[0]}:{server_address[1]} failed: {e}") from e

    if reply != wire_token:
        if strict:
            raise HandshakeError(f"Bad handshake token from {source[0]}:{source[1]}")
        logger.warning(f"Handshake reply from {source[0]}:{source[1]} does not carry the token, "
                       f"accepting it as a liveness reply")

    session.establish(server_address)
    logger.info(f"Connection with {server_address[0]}:{server_address[1]} established")
    return server_address


def server_handshake(session: Session) -> Address:
    """
    Listen for the token and answer the first client that sends it

    Non-matching datagrams are logged and dropped; the loop has no timeout.

    Args:
        session: Session whose socket is bound to the listening port

    Returns:
        The observed address of the client
    """
    wire_token = encode_token(session.token)
    sock = session.socket

    while True:
        try:
            data, source = sock.recvfrom(RECV_SIZE)
        except OSError as e:
            raise HandshakeError(f"Receiving handshake failed: {e}") from e

        if data == wire_token:
            break

        logger.warning(f"Bad handshake token from {source[0]}:{source[1]} "
                       f"({len(data)} bytes), still listening")

    try:
        sock.sendto(wire_token, source)
    except OSError as e:
        raise HandshakeError(f"Answering handshake from {source[0]}:{source[1]} failed: {e}") from e

    session.establish(source)
    logger.info(f"Client connected from {source[0]}:{source[1]}")
    return source


def perform_handshake(session: Session, server_address: Address = None,
                      strict: bool = False) -> Address:
    """Run the handshake for the session's role"""
    if session.role is Role.SERVER:
        return server_handshake(session)

    if server_address is None:
        raise HandshakeError("Client handshake requires a server address")
    return client_handshake(session, server_address, strict=strict)
