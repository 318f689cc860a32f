"""
Steady-state relay between the virtual interface and the peer.

One thread blocks on a readiness wait over the interface and the socket with
no timeout. Each wake-up services a single ready input; I/O errors on either
side are logged and the loop keeps going.
"""
import select
import logging
from typing import Callable, List

from udptun.networking.errors import RelayError
from udptun.networking.session import Session

# Largest UDP payload
MAX_DATAGRAM_SIZE = 65535


class RelayLoop:
    """
    Moves frames between the session's interface and socket
    """

    def __init__(self, session: Session, selector: Callable = select.select):
        """
        Initialize the relay loop

        Args:
            session: Established session
            selector: select.select compatible readiness wait
        """
        if not session.established:
            raise RelayError("Relay loop requires an established session")

        self.session = session
        self.selector = selector
        self.logger = logging.getLogger("udptun.relay")

        # Serviced first when both inputs are ready on the same wake-up
        self._prefer_interface = True

    def wait(self) -> List:
        """
        Block until the interface or the socket is readable

        Returns:
            The ready handles
        """
        handles = [self.session.interface, self.session.socket]
        while True:
            try:
                readable, _, _ = self.selector(handles, [], [])
            except InterruptedError:
                self.logger.debug("Readiness wait interrupted, retrying")
                continue
            except (OSError, ValueError) as e:
                raise RelayError(f"Readiness wait failed: {e}") from e

            if readable:
                return readable

    def step(self) -> None:
        """Wait once and service one ready input"""
        readable = self.wait()
        interface_ready = self.session.interface in readable
        socket_ready = self.session.socket in readable

        if interface_ready and (self._prefer_interface or not socket_ready):
            self.interface_to_peer()
            self._prefer_interface = False
        elif socket_ready:
            self.peer_to_interface()
            self._prefer_interface = True

    def run(self) -> None:
        """Relay until the process is terminated"""
        peer = self.session.peer_address
        self.logger.info(f"Relaying {self.session.role.value} traffic with {peer[0]}:{peer[1]} "
                         f"({self.session.peer_policy.value} peer)")
        while True:
            self.step()

    def interface_to_peer(self) -> None:
        """Read one frame from the interface and send it as one datagram"""
        session = self.session
        stats = session.stats

        try:
            frame = session.interface.read_frame()
        except OSError as e:
            stats.errors += 1
            self.logger.error(f"Read from virtual interface failed: {e}")
            return

        if not frame:
            return

        try:
            session.socket.sendto(frame, session.peer_address)
        except OSError as e:
            stats.errors += 1
            self.logger.error(f"Send to {session.peer_address[0]}:{session.peer_address[1]} failed: {e}")
            return

        stats.frames_to_peer += 1
        stats.bytes_to_peer += len(frame)
        self.logger.debug(f"TAP2NET {stats.frames_to_peer}: {len(frame)} bytes to peer")

    def peer_to_interface(self) -> None:
        """Receive one datagram and write its payload as one frame"""
        session = self.session
        stats = session.stats

        try:
            payload, source = session.socket.recvfrom(MAX_DATAGRAM_SIZE)
        except OSError as e:
            stats.errors += 1
            self.logger.error(f"Receive from network failed: {e}")
            return

        session.update_peer(source)

        try:
            session.interface.write_frame(payload)
        except OSError as e:
            stats.errors += 1
            self.logger.error(f"Write to virtual interface failed: {e}")
            return

        stats.frames_from_peer += 1
        stats.bytes_from_peer += len(payload)
        self.logger.debug(f"NET2TAP {stats.frames_from_peer}: {len(payload)} bytes "
                          f"from {source[0]}:{source[1]}")
