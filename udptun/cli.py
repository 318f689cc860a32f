"""
Main entry point for the UDP tunnel.
Parses the command line, then runs a server or client tunnel node.
"""
import sys
import signal
import argparse
from typing import List, Optional

from udptun.networking.errors import TunnelError
from udptun.node import TunnelNode
from udptun.utils.config import ConfigManager, TunnelSettings, DEFAULT_PORT
from udptun.utils.logging_setup import setup_logging
from udptun.web.app import start_status_server

USAGE = """Usage:
%(prog)s -i <ifacename> [-s|-c <serverIP>] [-p <port>] [-u|-a] [-d]
%(prog)s -h

-i <ifacename>: Name of interface to use (mandatory)
-s|-c <serverIP>: run in server mode (-s), or specify server address (-c <serverIP>) (mandatory)
-p <port>: port to listen on (if run in server mode) or to connect to (in client mode), default %(port)d
-u|-a: use TUN (-u, default) or TAP (-a)
-d: outputs debug information while running
-h: prints this help text

--config <file>: JSON configuration file
--peer-policy fixed|roaming: follow the peer's source address (roaming, default) or not
--strict-handshake: reject a server reply that does not carry the token
--log-file <file>: also log to this file
--status-port <port>: serve a JSON status page on 127.0.0.1:<port>
"""


class UsageError(Exception):
    """Invalid command line"""


class TunnelArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports every error through UsageError"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> TunnelArgumentParser:
    parser = TunnelArgumentParser(prog="udptun", add_help=False)
    parser.add_argument('-i', dest='interface')
    role = parser.add_mutually_exclusive_group()
    role.add_argument('-s', dest='server', action='store_true')
    role.add_argument('-c', dest='server_address')
    parser.add_argument('-p', dest='port', type=int)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('-u', dest='device_mode', action='store_const', const='tun')
    mode.add_argument('-a', dest='device_mode', action='store_const', const='tap')
    parser.add_argument('-d', dest='debug', action='store_true')
    parser.add_argument('-h', dest='help', action='store_true')
    parser.add_argument('--config')
    parser.add_argument('--peer-policy', choices=['fixed', 'roaming'])
    parser.add_argument('--strict-handshake', action='store_true', default=None)
    parser.add_argument('--log-file')
    parser.add_argument('--status-port', type=int)
    return parser


def parse_args(argv: List[str]) -> argparse.Namespace:
    """
    Parse and check the command line

    Raises:
        UsageError: on -h, unknown options, extra arguments or missing mandatory options
    """
    args = build_parser().parse_args(argv)

    if args.help:
        raise UsageError(None)
    if not args.interface:
        raise UsageError("Must specify interface name!")
    if not args.server and not args.server_address:
        raise UsageError("Must specify client or server mode!")

    return args


def usage(message: Optional[str] = None) -> int:
    """Print usage to stderr and return the exit status"""
    if message:
        print(message, file=sys.stderr)
    print(USAGE % {"prog": "udptun", "port": DEFAULT_PORT},
          file=sys.stderr, end="")
    return 1


def build_settings(args: argparse.Namespace) -> TunnelSettings:
    """
    Layer command-line values over the configuration file

    Raises:
        ValueError: if the merged configuration is invalid
    """
    config = ConfigManager(args.config)

    cli_values = {
        "tunnel.port": args.port,
        "tunnel.device_mode": args.device_mode,
        "tunnel.peer_policy": args.peer_policy,
        "tunnel.strict_handshake": args.strict_handshake,
        "logging.file": args.log_file,
        "web.port": args.status_port,
    }
    for key, value in cli_values.items():
        if value is not None:
            config.set(key, value)
    if args.status_port is not None:
        config.set("web.enabled", True)

    errors = config.validate()
    if errors:
        raise ValueError("; ".join(errors))

    return TunnelSettings.from_sources(
        config,
        interface=args.interface,
        server_address=args.server_address,
        debug=args.debug
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the tunnel

    Returns:
        Exit code
    """
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as e:
        return usage(str(e) if e.args[0] else None)

    try:
        settings = build_settings(args)
    except ValueError as e:
        return usage(f"Invalid configuration: {e}")

    logger = setup_logging(
        app_name="udptun",
        log_level=settings.log_level,
        log_file=settings.log_file
    )

    node = TunnelNode(settings)

    def signal_handler(signum, frame):
        """Handle termination signals"""
        logger.info(f"Received signal {signum}, shutting down")
        node.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        node.start()
        if settings.web_enabled:
            start_status_server(node, settings.web_host, settings.web_port)
        node.run()
    except TunnelError as e:
        logger.error(str(e))
        node.stop()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
