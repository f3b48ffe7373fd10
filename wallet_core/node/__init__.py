"""Access to the remote ledger node: models, codec, retry policy and client."""

from .client import NodeClient, retry_policy_from_config
from .gateway import NodeGateway
from .models import ZERO_ADDRESS, Page, TransferType
from .retry import RetryPolicy, call_with_retry

__all__ = [
    "NodeClient",
    "NodeGateway",
    "Page",
    "RetryPolicy",
    "TransferType",
    "ZERO_ADDRESS",
    "call_with_retry",
    "retry_policy_from_config",
]
