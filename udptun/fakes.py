"""
Test doubles for the tunnel's I/O handles.

A connected AF_UNIX/SOCK_DGRAM pair stands in for a TUN device: it keeps frame
boundaries and is selectable like the real descriptor.
"""
import socket


class FakeInterface:
    """Virtual interface double backed by a datagram socket pair"""

    def __init__(self, name: str = "tun0", mode: str = "tun"):
        self.name = name
        self.mode = mode
        self._inner = None
        self.outer = None

    def open(self):
        self._inner, self.outer = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
        self.outer.settimeout(2.0)
        return self

    def fileno(self):
        return self._inner.fileno()

    def read_frame(self):
        return self._inner.recv(65535)

    def write_frame(self, frame):
        return self._inner.send(frame)

    def close(self):
        for sock in (self._inner, self.outer):
            if sock is not None:
                sock.close()
        self._inner = self.outer = None

    # Test side of the device

    def inject(self, frame):
        """A local process sends a frame through the interface"""
        self.outer.send(frame)

    def collect(self):
        """Frame the tunnel wrote into the interface"""
        return self.outer.recv(65535)


def udp_socket(timeout: float = 2.0) -> socket.socket:
    """Loopback UDP socket on an ephemeral port"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(timeout)
    return sock
