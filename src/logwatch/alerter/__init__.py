"""Alert batching and delivery.

Provides the per-run aggregator, the dispatcher, and the email and chat
webhook transports.
"""

from .aggregator import AlertAggregator, AlertBatch, AlertMessage
from .dispatcher import AlertDispatcher, DispatchReport, Transport
from .email import EmailClient
from .slack import SlackClient

__all__ = [
    # Aggregation
    "AlertAggregator",
    "AlertBatch",
    "AlertMessage",
    # Dispatch
    "AlertDispatcher",
    "DispatchReport",
    "Transport",
    # Transports
    "EmailClient",
    "SlackClient",
]
