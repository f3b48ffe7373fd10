"""Wallet views over the node: reconciled balances and stitched transfer history."""

from .balances import BalanceReconciler
from .mapper import ConfirmedTransferRecord, PendingTransferRecord, TransferStatus, UnifiedTransferRecord
from .service import WalletService
from .stitcher import TransferPageStitcher, UnifiedTransferPage

__all__ = [
    "BalanceReconciler",
    "ConfirmedTransferRecord",
    "PendingTransferRecord",
    "TransferPageStitcher",
    "TransferStatus",
    "UnifiedTransferPage",
    "UnifiedTransferRecord",
    "WalletService",
]
