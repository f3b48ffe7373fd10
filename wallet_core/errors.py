"""Exception taxonomy shared by the node gateway and the wallet services."""

from __future__ import annotations

from typing import Any, Mapping


class WalletError(Exception):
    """Base class for every error raised by :mod:`wallet_core`."""

    status_code = 500

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else None


class WalletValidationError(WalletError):
    """Request rejected before any remote call was made."""

    status_code = 400


class WalletNotFoundError(WalletError):
    status_code = 404


class NodeResponseError(WalletError):
    """The node answered, but with an error status. Never retried."""

    status_code = 502

    def __init__(self, message: str, *, node_status: int, endpoint: str) -> None:
        super().__init__(message, details={"node_status": node_status, "endpoint": endpoint})
        self.node_status = node_status
        self.endpoint = endpoint


class NodeUnavailableError(WalletError):
    """Transport failures persisted after the retry policy was exhausted."""

    status_code = 503

    def __init__(self, message: str, *, endpoint: str, attempts: int) -> None:
        super().__init__(message, details={"endpoint": endpoint, "attempts": attempts})
        self.endpoint = endpoint
        self.attempts = attempts


__all__ = [
    "WalletError",
    "WalletValidationError",
    "WalletNotFoundError",
    "NodeResponseError",
    "NodeUnavailableError",
]
