"""
Dynamoscan: heuristic exploit and vulnerability detection for Solana
transactions and deployed programs.
"""

__version__ = "0.1.0"

from .core.analyzer import ChainAnalyzer  # noqa: E402
from .data.solana_rpc import SolanaRPCClient  # noqa: E402

__all__ = ["ChainAnalyzer", "SolanaRPCClient", "__version__"]
