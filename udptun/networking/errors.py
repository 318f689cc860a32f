"""
Exception hierarchy for the tunnel.
Setup and handshake errors are fatal; relay I/O errors are logged and absorbed.
"""


class TunnelError(Exception):
    """Base class for all tunnel errors"""


class SetupError(TunnelError):
    """Device open, socket creation or bind failure"""


class HandshakeError(TunnelError):
    """Send/receive failure (or rejected reply) during the token exchange"""


class RelayError(TunnelError):
    """The relay loop's readiness wait failed for a reason other than an interruption"""
