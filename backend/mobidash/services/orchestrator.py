"""
Multi-operator GBFS fan-out.
"""

from typing import Optional, Sequence

import httpx
import structlog

from mobidash.clients.gbfs import GBFSClient
from mobidash.config import Settings
from mobidash.core.concurrency import gather_settled, successes
from mobidash.core.exceptions import OperatorNotFoundError, OperatorUnavailableError
from mobidash.core.metrics import OPERATOR_SNAPSHOTS
from mobidash.core.operators import OPERATORS, Operator, get_operator
from mobidash.schemas.gbfs import (
    OperatorInfo,
    OperatorList,
    OperatorSnapshot,
    OperatorSnapshotList,
)
from mobidash.utils.cache import InMemoryCache

logger = structlog.get_logger()


def operator_info(operator: Operator) -> OperatorInfo:
    return OperatorInfo(
        id=operator.id,
        name=operator.name,
        location=operator.location,
        website=operator.website,
    )


class OperatorFeedService:
    """Builds GBFS snapshots for registry operators."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        cache: Optional[InMemoryCache] = None,
        operators: Sequence[Operator] = OPERATORS,
    ):
        self.http_client = http_client
        self.settings = settings
        self.cache = cache
        self.operators = tuple(operators)

    def client_for(self, operator: Operator) -> GBFSClient:
        return GBFSClient(
            self.http_client,
            operator.gbfs_url,
            cache=self.cache,
            cache_ttl=self.settings.gbfs_cache_ttl,
            default_language=self.settings.gbfs_default_language,
        )

    async def fetch_operator(self, operator: Operator) -> Optional[OperatorSnapshot]:
        snapshot = await self.client_for(operator).get_snapshot()
        if snapshot is None:
            OPERATOR_SNAPSHOTS.labels(outcome="unavailable").inc()
            logger.error("Failed to fetch data for operator", operator=operator.name, url=operator.gbfs_url)
            return None
        OPERATOR_SNAPSHOTS.labels(outcome="ok").inc()
        return OperatorSnapshot(operator=operator_info(operator), data=snapshot)

    async def fetch_all(self) -> OperatorSnapshotList:
        """
        Snapshots for the first ``operator_fanout_limit`` operators.

        Every fetch runs to completion; failed or empty operators are dropped
        from the result instead of failing the request.
        """
        selected = self.operators[: self.settings.operator_fanout_limit]
        results = await gather_settled(self.fetch_operator(op) for op in selected)

        for operator, result in zip(selected, results):
            if not result.ok:
                OPERATOR_SNAPSHOTS.labels(outcome="error").inc()
                logger.error("Operator fetch raised", operator=operator.id, error=str(result.error))

        snapshots = successes(results)
        logger.info("Operator fan-out complete", requested=len(selected), succeeded=len(snapshots))
        return OperatorSnapshotList(operators=snapshots, total=len(self.operators))

    async def fetch_one(self, operator_id: str) -> OperatorSnapshot:
        operator = get_operator(operator_id, self.operators)
        if operator is None:
            raise OperatorNotFoundError(operator_id)

        snapshot = await self.fetch_operator(operator)
        if snapshot is None:
            raise OperatorUnavailableError(operator.name, operator.gbfs_url)
        return snapshot

    def list_operators(self) -> OperatorList:
        return OperatorList(operators=[operator_info(op) for op in self.operators])
