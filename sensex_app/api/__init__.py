"""
HTTP API serving the buffered ticks to the front-end chart.
"""
from .web_server import TickWebServer, create_app

__all__ = ["TickWebServer", "create_app"]
