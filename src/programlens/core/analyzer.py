"""
Program performance analyzer.

Pipeline for one analysis call:

    program account + recent signatures      (TransactionFetcher)
    transaction details, fetched in parallel (join before aggregation)
    decode each transaction                  (skip malformed ones)
    aggregate into ProgramMetrics            (scored)
    recommendations                          (pure)

Every call is independent: nothing is cached between calls.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from solders.pubkey import Pubkey

from ..analysis.aggregator import aggregate_metrics
from ..analysis.decoder import TransactionDecodeError, decode_transaction
from ..analysis.models import ProgramMetrics, ProgramSnapshot, Recommendation, TransactionRecord
from ..config import MAX_TX_LIMIT, AnalyzerConfig
from ..log import get_logger
from ..scoring.recommendations import RecommendationEngine
from .fetcher import TransactionFetcher
from .rpc import RpcError, SolanaRpcClient

logger = get_logger(__name__)


class AnalysisError(RuntimeError):
    """An analysis could not produce a metrics snapshot."""


@dataclass
class AnalysisReport:
    """Everything one analysis call produced."""
    snapshot: ProgramSnapshot
    metrics: ProgramMetrics
    recommendations: List[Recommendation] = field(default_factory=list)
    requested_limit: int = 0
    skipped_signatures: List[str] = field(default_factory=list)
    rent_exempt_lamports: Optional[int] = None
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict:
        return {
            "program": self.snapshot.address,
            "generated_at": self.generated_at,
            "account": {
                "data_size_bytes": self.snapshot.account_data_size_bytes,
                "lamports": self.snapshot.lamport_balance,
                "rent_exempt_lamports": self.rent_exempt_lamports,
            },
            "sample": {
                "requested": self.requested_limit,
                "analyzed": self.metrics.transaction_count,
                "skipped": self.skipped_signatures,
            },
            "metrics": self.metrics.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


def validate_program_address(address: str) -> str:
    """
    Check that an address is a base58 public key.

    Raises:
        AnalysisError: If the address cannot be parsed
    """
    try:
        return str(Pubkey.from_string(address))
    except ValueError as e:
        raise AnalysisError(f"Invalid program address {address!r}: {e}") from e


class ProgramAnalyzer:
    """
    Analyzes a program's recent on-chain performance.

    Uses the given RPC client if one is passed, otherwise opens a
    SolanaRpcClient against config.rpc_url for the duration of each call.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None, client: Any = None):
        self.config = config or AnalyzerConfig()
        self._client = client
        self.engine = RecommendationEngine(
            rent_lamports_per_byte_year=self.config.rent_lamports_per_byte_year,
        )

    async def analyze(self, program_address: str, tx_limit: Optional[int] = None) -> ProgramMetrics:
        """
        Build the metrics snapshot for a program.

        Args:
            program_address: Base58 program account address
            tx_limit: Number of recent transactions to sample (1-20)

        Returns:
            Scored ProgramMetrics

        Raises:
            AnalysisError: On an invalid address or tx_limit, or any RPC failure
        """
        report = await self.analyze_report(program_address, tx_limit)
        return report.metrics

    async def analyze_report(self, program_address: str, tx_limit: Optional[int] = None) -> AnalysisReport:
        """Like analyze(), also returning the snapshot, skips and recommendations."""
        limit = self.config.tx_limit if tx_limit is None else tx_limit
        if not 1 <= limit <= MAX_TX_LIMIT:
            raise AnalysisError(f"tx_limit must be between 1 and {MAX_TX_LIMIT}, got {limit}")
        address = validate_program_address(program_address)

        logger.info("analysis_started", program=address, limit=limit, rpc_url=self.config.rpc_url)
        try:
            if self._client is not None:
                report = await self._collect(self._client, address, limit)
            else:
                async with SolanaRpcClient(
                    self.config.rpc_url,
                    timeout=self.config.timeout,
                    commitment=self.config.commitment,
                ) as client:
                    report = await self._collect(client, address, limit)
        except RpcError as e:
            raise AnalysisError(f"Analysis of {address} failed: {e}") from e

        logger.info(
            "analysis_completed",
            program=address,
            transaction_count=report.metrics.transaction_count,
            skipped=len(report.skipped_signatures),
            score=round(report.metrics.optimization_score, 2),
        )
        return report

    async def _collect(self, client: Any, address: str, limit: int) -> AnalysisReport:
        fetcher = TransactionFetcher(client, max_concurrency=self.config.max_concurrency)

        snapshot = await client.get_program_account(address)
        rent_exempt = await client.get_minimum_balance_for_rent_exemption(snapshot.account_data_size_bytes)
        signatures = await fetcher.fetch_signatures(address, limit)
        responses = await fetcher.fetch_details(signatures)

        records, skipped = self.decode_all(responses)
        metrics = aggregate_metrics(
            snapshot,
            records,
            compute_units_limit=self.config.compute_units_limit,
            read_bytes_per_access=self.config.read_bytes_per_access,
            write_bytes_per_access=self.config.write_bytes_per_access,
        )
        return AnalysisReport(
            snapshot=snapshot,
            metrics=metrics,
            recommendations=self.engine.recommend(metrics),
            requested_limit=limit,
            skipped_signatures=skipped,
            rent_exempt_lamports=rent_exempt,
        )

    def decode_all(self, responses) -> Tuple[List[TransactionRecord], List[str]]:
        """Decode responses, skipping missing or malformed transactions."""
        records = []
        skipped = []
        for signature, response in responses:
            if response is None:
                logger.warning("transaction_skipped", signature=signature, reason="not found")
                skipped.append(signature)
                continue
            try:
                records.append(decode_transaction(signature, response))
            except TransactionDecodeError as e:
                logger.warning("transaction_skipped", signature=signature, reason=str(e))
                skipped.append(signature)
        return records, skipped


async def analyze(
    program_address: str,
    tx_limit: int = MAX_TX_LIMIT,
    config: Optional[AnalyzerConfig] = None,
    client: Any = None,
) -> ProgramMetrics:
    """Analyze a program with a fresh ProgramAnalyzer."""
    return await ProgramAnalyzer(config, client).analyze(program_address, tx_limit)
