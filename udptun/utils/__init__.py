"""
Utility modules for the UDP tunnel.
Includes configuration, logging, and permissions handling.
"""

from udptun.utils.config import ConfigManager, TunnelSettings
from udptun.utils.logging_setup import setup_logging
from udptun.utils.permissions import check_admin_privileges

__all__ = [
    'ConfigManager',
    'TunnelSettings',
    'setup_logging',
    'check_admin_privileges'
]
