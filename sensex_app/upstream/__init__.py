"""
Upstream market-data provider access.
"""
from .client import UpstreamClient

__all__ = ["UpstreamClient"]
