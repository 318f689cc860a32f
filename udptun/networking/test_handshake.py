"""
Tests for the token handshake between server and client.
"""
import threading

import pytest

from udptun.networking.errors import HandshakeError
from udptun.networking.handshake import (
    HANDSHAKE_TOKEN, encode_token, client_handshake, server_handshake, perform_handshake
)
from udptun.networking.session import Role

WIRE_TOKEN = encode_token(HANDSHAKE_TOKEN)


def run_in_thread(target, *args):
    """Run target in a thread, collecting its result or exception"""
    outcome = {}

    def runner():
        try:
            outcome["result"] = target(*args)
        except Exception as e:
            outcome["error"] = e

    thread = threading.Thread(target=runner, daemon=True)
    thread.start()
    return thread, outcome


def test_wire_token_includes_terminator():
    assert WIRE_TOKEN == b"Wazaaaaaaaaaaahhhh !\x00"
    assert len(WIRE_TOKEN) == 21


def test_server_and_client_converge(make_session):
    server = make_session(Role.SERVER)
    client = make_session(Role.CLIENT)
    server_addr = server.socket.getsockname()
    client_addr = client.socket.getsockname()

    thread, outcome = run_in_thread(server_handshake, server)
    assert client_handshake(client, server_addr) == server_addr
    thread.join(timeout=5)

    assert "error" not in outcome
    assert server.established and client.established
    assert server.peer_address == client_addr
    assert client.peer_address == server_addr


def test_server_ignores_bad_tokens_and_keeps_listening(make_session, peer_socket):
    server = make_session(Role.SERVER)
    server_addr = server.socket.getsockname()
    intruder = peer_socket()

    thread, outcome = run_in_thread(server_handshake, server)
    for payload in (b"hello", HANDSHAKE_TOKEN.encode(), WIRE_TOKEN + b"extra", b""):
        intruder.sendto(payload, server_addr)

    thread.join(timeout=0.5)
    assert thread.is_alive()
    assert not server.established

    client = peer_socket()
    client.sendto(WIRE_TOKEN, server_addr)
    thread.join(timeout=5)

    assert outcome.get("result") == client.getsockname()
    assert server.peer_address == client.getsockname()
    assert client.recvfrom(100) == (WIRE_TOKEN, server_addr)


def test_client_accepts_any_reply_by_default(make_session, peer_socket):
    client = make_session(Role.CLIENT)
    fake_server = peer_socket()
    fake_server_addr = fake_server.getsockname()

    thread, outcome = run_in_thread(client_handshake, client, fake_server_addr)
    data, source = fake_server.recvfrom(100)
    assert data == WIRE_TOKEN

    # Reply from a different socket with the wrong content
    other = peer_socket()
    other.sendto(b"not the token", source)
    thread.join(timeout=5)

    assert "error" not in outcome
    assert client.peer_address == fake_server_addr


def test_strict_client_rejects_bad_reply(make_session, peer_socket):
    client = make_session(Role.CLIENT)
    fake_server = peer_socket()

    thread, outcome = run_in_thread(client_handshake, client, fake_server.getsockname(), True)
    _, source = fake_server.recvfrom(100)
    fake_server.sendto(b"nope", source)
    thread.join(timeout=5)

    assert isinstance(outcome.get("error"), HandshakeError)
    assert not client.established


def test_client_receive_failure_is_fatal(make_session, peer_socket):
    client = make_session(Role.CLIENT)
    client.socket.settimeout(0.2)
    silent_server = peer_socket()

    with pytest.raises(HandshakeError):
        client_handshake(client, silent_server.getsockname())
    assert not client.established


def test_server_receive_failure_is_fatal(make_session):
    server = make_session(Role.SERVER)
    server.socket.settimeout(0.2)

    with pytest.raises(HandshakeError):
        server_handshake(server)


def test_perform_handshake_requires_server_address_for_client(make_session):
    client = make_session(Role.CLIENT)
    with pytest.raises(HandshakeError):
        perform_handshake(client)
