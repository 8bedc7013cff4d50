"""
Upstream record normalization module.

Converts loosely-shaped upstream futures records into canonical ticks keyed
by contract expiry.
"""
