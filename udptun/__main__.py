"""
Allow running the tunnel with ``python -m udptun``.
"""
import sys

from udptun.cli import main

sys.exit(main())
