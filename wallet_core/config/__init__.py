from .loader import load_wallet_config
from .schema import WalletConfig

__all__ = ["load_wallet_config", "WalletConfig"]
