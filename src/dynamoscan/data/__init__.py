"""
Data Module

Raw chain records and the Solana JSON-RPC data source.
"""

from .records import AccountInfo, TransactionRecord
from .solana_rpc import ChainDataSource, SolanaRPCClient

__all__ = ['AccountInfo', 'TransactionRecord', 'ChainDataSource', 'SolanaRPCClient']
