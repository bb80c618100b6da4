"""
programlens: on-chain program performance analyzer for Solana.

Samples a program's recent transactions, estimates compute, CPI depth,
account contention and I/O from their metadata and logs, then scores the
program and suggests optimizations.
"""

__version__ = "0.1.0"

from .analysis.models import ProgramMetrics, ProgramSnapshot, TransactionRecord, Priority, Recommendation
from .config import AnalyzerConfig
from .core.analyzer import ProgramAnalyzer, AnalysisError, AnalysisReport, analyze
from .scoring import score, recommend

__all__ = [
    "ProgramMetrics",
    "ProgramSnapshot",
    "TransactionRecord",
    "Priority",
    "Recommendation",
    "AnalyzerConfig",
    "ProgramAnalyzer",
    "AnalysisError",
    "AnalysisReport",
    "analyze",
    "score",
    "recommend",
]
