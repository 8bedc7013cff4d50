"""
Web Server for the Sensex tick chart
Uses Flask to serve read-only snapshots of the tick store
"""

from typing import Optional

from flask import Flask, Response, jsonify

from ..config.defaults import ServerParams
from ..logging.config import get_logger
from ..scheduler.poller import TickPoller
from ..store.tick_store import TickStore

logger = get_logger(__name__)

LIVENESS_MESSAGE = "Sensex tick server is running"


def create_app(store: TickStore, config: Optional[ServerParams] = None,
               poller: Optional[TickPoller] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        store: Tick store to read from; routes never mutate it
        config: Server parameters (CORS origin)
        poller: Optional TickPoller whose counters are exposed on /api/status
    """
    config = config or ServerParams()
    app = Flask(__name__)
    app.json.sort_keys = False

    @app.route("/")
    def index():
        return Response(LIVENESS_MESSAGE, mimetype="text/plain")

    @app.route("/api/sensexTicks")
    def sensex_ticks():
        """Current ticks grouped by expiry, in arrival order"""
        return jsonify({
            "result": 1,
            "resultMessage": "Success",
            "resultData": store.snapshot(),
        })

    @app.route("/api/status")
    def status():
        payload = {"store": store.stats()}
        if poller is not None:
            payload["poller"] = poller.status()
        return jsonify(payload)

    if config.cors_origin:
        @app.after_request
        def add_cors_headers(response):
            response.headers["Access-Control-Allow-Origin"] = config.cors_origin
            return response

    return app


class TickWebServer:
    """Flask application bound to a tick store, with a blocking run()"""

    def __init__(self, store: TickStore, config: Optional[ServerParams] = None,
                 poller: Optional[TickPoller] = None):
        self.config = config or ServerParams()
        self.host = self.config.host
        self.port = self.config.port
        self.app = create_app(store, self.config, poller=poller)

    def run(self, debug=False):
        """Run the web server"""
        logger.info(f"Sensex server running on http://{self.host}:{self.port}")

        # Threaded so chart reads never wait on each other
        self.app.run(
            host=self.host,
            port=self.port,
            debug=debug,
            threaded=True,
            use_reloader=False,
        )
