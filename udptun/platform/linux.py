"""
Linux TUN/TAP device handle.
Attaches to a virtual interface through /dev/net/tun and moves whole frames.
"""
import os
import fcntl
import struct
import logging
from typing import Optional

from udptun.networking.errors import SetupError

logger = logging.getLogger("udptun.linux")

# Constants for TUN setup
TUN_DEVICE = "/dev/net/tun"
TUNSETIFF = 0x400454ca
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFNAMSIZ = 16

MODE_TUN = "tun"
MODE_TAP = "tap"
MODE_FLAGS = {
    MODE_TUN: IFF_TUN,
    MODE_TAP: IFF_TAP,
}

# Upper bound for one frame read from the device
MAX_FRAME_SIZE = 65535


class TunInterface:
    """
    TUN/TAP interface handle for Linux

    Frames are opaque bytes: one read returns exactly one frame, one write
    injects exactly one frame. Link state and addressing are left to the
    operator.
    """

    def __init__(self, name: str, mode: str = MODE_TUN):
        """
        Initialize the interface handle

        Args:
            name: Interface name to create or attach to
            mode: MODE_TUN (IP packets) or MODE_TAP (Ethernet frames)
        """
        if mode not in MODE_FLAGS:
            raise SetupError(f"Unknown device mode: {mode}")
        if len(name.encode()) >= IFNAMSIZ:
            raise SetupError(f"Interface name too long (max {IFNAMSIZ - 1} bytes): {name}")

        self.name = name
        self.mode = mode
        self.fd: Optional[int] = None

    def open(self) -> "TunInterface":
        """
        Attach to the device

        Returns:
            self, for chaining
        """
        logger.info(f"Attaching to {self.mode} interface: {self.name}")

        try:
            self.fd = os.open(TUN_DEVICE, os.O_RDWR)
        except OSError as e:
            raise SetupError(f"Opening {TUN_DEVICE}: {e}") from e

        try:
            ifr = struct.pack("16sH", self.name.encode(), MODE_FLAGS[self.mode] | IFF_NO_PI)
            result = fcntl.ioctl(self.fd, TUNSETIFF, ifr)
        except OSError as e:
            self.close()
            raise SetupError(f"ioctl(TUNSETIFF) on {self.name}: {e}") from e

        # The kernel fills in the name when a pattern such as "tun%d" was given
        self.name = result[:IFNAMSIZ].rstrip(b"\x00").decode()
        logger.info(f"Successfully connected to interface {self.name}")
        return self

    def fileno(self) -> int:
        if self.fd is None:
            raise ValueError(f"Interface {self.name} is not open")
        return self.fd

    def read_frame(self) -> bytes:
        """Read one frame from the device"""
        return os.read(self.fileno(), MAX_FRAME_SIZE)

    def write_frame(self, frame: bytes) -> int:
        """
        Inject one frame into the device

        Returns:
            Number of bytes written
        """
        return os.write(self.fileno(), frame)

    def close(self) -> None:
        """Release the device"""
        if self.fd is not None:
            logger.info(f"Closing interface: {self.name}")
            os.close(self.fd)
            self.fd = None
