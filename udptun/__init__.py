"""
udptun: a point-to-point tunnel between a TUN/TAP interface and a UDP peer.
"""

__version__ = "1.0.0"
