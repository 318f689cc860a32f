"""
Platform-specific virtual interface support.
Only Linux TUN/TAP devices are implemented.
"""

from udptun.platform.linux import TunInterface, MODE_TUN, MODE_TAP

__all__ = ['TunInterface', 'MODE_TUN', 'MODE_TAP']
