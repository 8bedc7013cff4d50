"""
Sensex App - Sensex futures tick relay

Polls an upstream market-data API during the trading session, buffers
de-duplicated price ticks in memory per contract expiry, and re-serves
them over a small HTTP API for a front-end chart.
"""

__version__ = "0.1.0"
__author__ = "Sensex App Team"
