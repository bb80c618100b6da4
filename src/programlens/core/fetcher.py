"""
Transaction Fetcher: recent signatures and their details for a program.

Works against any client exposing the collaborator interface of
SolanaRpcClient:

    get_program_account(address) -> ProgramSnapshot
    get_minimum_balance_for_rent_exemption(size) -> int
    get_recent_signatures(address, limit) -> List[str]
    get_transaction_details(signature) -> Optional[dict]
"""

import asyncio
from typing import Any, List, Optional, Tuple

from ..config import MAX_TX_LIMIT
from ..log import get_logger

logger = get_logger(__name__)


class TransactionFetcher:
    """
    Fetches a bounded sample of a program's recent transactions.

    Detail requests run concurrently up to max_concurrency. fetch_details
    only returns once every request has finished, and the first failure
    cancels the rest and propagates.
    """

    def __init__(self, client: Any, max_concurrency: int = 4):
        self.client = client
        self.max_concurrency = max_concurrency

    async def fetch_signatures(self, address: str, limit: int) -> List[str]:
        """Up to limit most recent signatures (limit is capped at MAX_TX_LIMIT)."""
        limit = min(limit, MAX_TX_LIMIT)
        signatures = await self.client.get_recent_signatures(address, limit)
        signatures = list(signatures)[:limit]
        logger.info("signatures_fetched", program=address, count=len(signatures), limit=limit)
        return signatures

    async def fetch_details(self, signatures: List[str]) -> List[Tuple[str, Optional[dict]]]:
        """
        Fetch transaction details for each signature.

        Returns:
            (signature, raw response) pairs in the order of signatures
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _fetch(signature: str) -> Tuple[str, Optional[dict]]:
            async with semaphore:
                return signature, await self.client.get_transaction_details(signature)

        tasks = [asyncio.ensure_future(_fetch(sig)) for sig in signatures]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
