"""Core: RPC access, fetching and the analysis pipeline."""

from .rpc import SolanaRpcClient, RpcError, AccountNotFoundError, check_rpc_health
from .fetcher import TransactionFetcher
from .analyzer import ProgramAnalyzer, AnalysisError, AnalysisReport, analyze

__all__ = [
    "SolanaRpcClient",
    "RpcError",
    "AccountNotFoundError",
    "check_rpc_health",
    "TransactionFetcher",
    "ProgramAnalyzer",
    "AnalysisError",
    "AnalysisReport",
    "analyze",
]
