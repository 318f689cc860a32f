"""
Status web interface for the UDP tunnel.
"""

from udptun.web.app import create_app, start_status_server

__all__ = ['create_app', 'start_status_server']
