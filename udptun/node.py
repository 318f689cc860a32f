"""
Tunnel node: opens the interface and socket, runs the handshake, then relays.
"""
import logging
from typing import Any, Callable, Dict, Optional

from udptun.networking.errors import SetupError
from udptun.networking.handshake import perform_handshake
from udptun.networking.relay import RelayLoop
from udptun.networking.session import Session, Role, PeerPolicy, Address
from udptun.networking.transport import open_socket, resolve_peer
from udptun.platform.linux import TunInterface
from udptun.utils.config import TunnelSettings
from udptun.utils.permissions import check_admin_privileges


class TunnelNode:
    """
    One end of the tunnel, either server or client
    """

    def __init__(self, settings: TunnelSettings,
                 interface_factory: Callable[[str, str], Any] = TunInterface,
                 socket_factory: Callable = open_socket):
        """
        Initialize the node

        Args:
            settings: Merged settings for this process
            interface_factory: Builds the virtual interface handle from (name, mode)
            socket_factory: Builds the bound UDP socket from (role, bind_address, port)
        """
        self.settings = settings
        self.role = Role.SERVER if settings.is_server else Role.CLIENT
        self.interface_factory = interface_factory
        self.socket_factory = socket_factory
        self.logger = logging.getLogger("udptun.node")

        self.interface = None
        self.socket = None
        self.session: Optional[Session] = None
        self.server_address: Optional[Address] = None
        self.relay: Optional[RelayLoop] = None

    def start(self) -> Session:
        """
        Acquire the interface and socket and build the session

        Returns:
            The new, not yet established, session
        """
        if self.session is not None:
            raise SetupError("Tunnel node already started")

        if not check_admin_privileges():
            self.logger.warning("Not running as root and CAP_NET_ADMIN is missing, "
                                "attaching to the interface will probably fail")

        if self.role is Role.CLIENT:
            self.server_address = resolve_peer(self.settings.server_address, self.settings.port)

        self.interface = self.interface_factory(self.settings.interface, self.settings.device_mode)
        self.interface.open()

        try:
            self.socket = self.socket_factory(self.role, self.settings.bind_address,
                                              self.settings.local_port)
        except SetupError:
            self.interface.close()
            self.interface = None
            raise

        self.session = Session(
            role=self.role,
            interface=self.interface,
            sock=self.socket,
            token=self.settings.token,
            peer_policy=PeerPolicy(self.settings.peer_policy)
        )
        return self.session

    def handshake(self) -> Address:
        """Run the token exchange for this node's role"""
        if self.session is None:
            raise SetupError("Tunnel node not started")

        if self.role is Role.CLIENT:
            self.logger.info(f"Connecting to server {self.server_address[0]}:{self.server_address[1]}")
        else:
            self.logger.info(f"Waiting for a client on port {self.settings.local_port}")

        return perform_handshake(self.session, self.server_address,
                                 strict=self.settings.strict_handshake)

    def run(self) -> None:
        """Start, handshake and relay until the process is terminated"""
        if self.session is None:
            self.start()
        if not self.session.established:
            self.handshake()

        self.relay = RelayLoop(self.session)
        self.relay.run()

    def stop(self) -> None:
        """Release the interface and the socket"""
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if self.interface is not None:
            self.interface.close()
            self.interface = None

    def status(self) -> Dict[str, Any]:
        """
        Status snapshot for reporting

        Returns:
            Dictionary describing the node and its session
        """
        status = {
            "role": self.role.value,
            "interface": getattr(self.interface, "name", self.settings.interface),
            "device_mode": self.settings.device_mode,
            "local_port": self.settings.local_port,
            "peer_address": None,
            "peer_policy": self.settings.peer_policy,
            "established": False,
            "stats": None,
        }

        if self.session is not None:
            status.update(self.session.snapshot())

        return status
