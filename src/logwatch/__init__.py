"""Incremental log scanner with threshold alerts.

Scans auth and web access logs for new lines since the previous run,
checks disk usage, and sends batched alerts by email or chat webhook.
"""

__version__ = "0.1.0"
