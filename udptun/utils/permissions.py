"""
Permission checks for attaching to TUN/TAP devices.
"""
import os
import logging

# CAP_NET_ADMIN bit in the effective capability set
CAP_NET_ADMIN = 12


def check_admin_privileges() -> bool:
    """
    Check whether the process may create or attach to a TUN/TAP device

    Returns:
        True if running as root or holding CAP_NET_ADMIN, False otherwise
    """
    logger = logging.getLogger("udptun.permissions")

    if os.geteuid() == 0:
        return True

    try:
        with open("/proc/self/status") as f:
            for line in f:
                if line.startswith("CapEff:"):
                    caps = int(line.split()[1], 16)
                    return bool(caps & (1 << CAP_NET_ADMIN))
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot read capabilities: {e}")

    return False
