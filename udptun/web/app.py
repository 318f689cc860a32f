"""
Status web interface for a running tunnel node.
Serves a read-only JSON view of the session and its counters.
"""
import logging
import threading

from flask import Flask, jsonify, redirect, url_for

logger = logging.getLogger("udptun.web")


def create_app(node) -> Flask:
    """
    Create the status application

    Args:
        node: TunnelNode (anything with a status() method)

    Returns:
        Flask application
    """
    app = Flask(__name__)
    app.config["TUNNEL_NODE"] = node

    @app.route('/')
    def index():
        return redirect(url_for('status'))

    @app.route('/status')
    def status():
        """Current role, peer and relay counters"""
        return jsonify(app.config["TUNNEL_NODE"].status())

    return app


def start_status_server(node, host: str = '127.0.0.1', port: int = 8080) -> threading.Thread:
    """
    Serve the status interface from a daemon thread

    The thread only reads node.status(); the relay keeps sole ownership of
    the session.

    Args:
        node: TunnelNode to report on
        host: Host to bind to
        port: Port to bind to

    Returns:
        The started thread
    """
    app = create_app(node)
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "debug": False, "use_reloader": False},
        name="status-web",
        daemon=True
    )
    thread.start()
    logger.info(f"Status interface listening on http://{host}:{port}/status")
    return thread
