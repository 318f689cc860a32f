"""
Tests for session state transitions.
"""
import pytest

from udptun.networking.session import Session, Role, PeerPolicy


def test_session_requires_handles():
    with pytest.raises(ValueError):
        Session(Role.SERVER, None, object(), "token")


def test_peer_is_set_once(make_session):
    session = make_session(Role.SERVER)
    assert session.peer_address is None
    assert not session.established

    session.establish(("127.0.0.1", 5000))
    assert session.established
    assert session.stats.established_at is not None

    with pytest.raises(RuntimeError):
        session.establish(("127.0.0.1", 6000))
    assert session.peer_address == ("127.0.0.1", 5000)


def test_update_peer_before_handshake_is_refused(make_session):
    session = make_session(Role.CLIENT)
    with pytest.raises(RuntimeError):
        session.update_peer(("127.0.0.1", 5000))


def test_update_peer_depends_on_policy(make_session):
    roaming = make_session(Role.SERVER, PeerPolicy.ROAMING)
    fixed = make_session(Role.SERVER, PeerPolicy.FIXED)
    for session in (roaming, fixed):
        session.establish(("127.0.0.1", 5000))

    assert roaming.update_peer(("127.0.0.1", 5000)) is False
    assert roaming.update_peer(("127.0.0.2", 5001)) is True
    assert roaming.peer_address == ("127.0.0.2", 5001)

    assert fixed.update_peer(("127.0.0.2", 5001)) is False
    assert fixed.peer_address == ("127.0.0.1", 5000)


def test_snapshot(make_session):
    session = make_session(Role.CLIENT, PeerPolicy.FIXED)
    snap = session.snapshot()
    assert snap["role"] == "client"
    assert snap["peer_address"] is None
    assert snap["peer_policy"] == "fixed"
    assert snap["established"] is False

    session.establish(("192.0.2.1", 55555))
    snap = session.snapshot()
    assert snap["peer_address"] == "192.0.2.1:55555"
    assert snap["stats"]["frames_to_peer"] == 0
