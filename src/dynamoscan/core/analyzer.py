"""Analysis Orchestrator.

``ChainAnalyzer`` sequences fetch, normalize, detect, diff, score and cache
for transactions, and fetch, scan and score for program audits.

Per signature a request moves from absent, to computing, to cached. At most
one computation per signature runs at a time: the first caller starts an
``asyncio.Task`` and records it in an in-flight map, later callers for the
same signature await that task instead of fetching again. Unrelated
signatures never wait on each other. Failed analyses are not cached, and
every caller waiting on the failed task sees the same error.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .. import __version__
from ..analyzers.bytecode_scanner import BytecodeScanner, recommendations_for
from ..analyzers.detectors import DetectorRegistry
from ..analyzers.normalizer import EvidenceNormalizer
from ..analyzers.scoring import code_quality, contract_risk_score, transaction_risk_score
from ..analyzers.state_diff import StateChangeDiffer
from ..analyzers.types import (
    AnalysisMetadata,
    AnalysisRequest,
    AnalysisResult,
    AuditMetadata,
    ContractAuditRequest,
    ContractAuditResult,
)
from ..data.solana_rpc import ChainDataSource
from ..exceptions import NotExecutableError, UpstreamFetchError
from ..utils.logger import get_logger
from ..utils.validation import validate_public_key, validate_signature
from .cache import ResultCache
from .config import Settings, settings as default_settings

logger = get_logger(__name__)


def _now() -> int:
    return int(datetime.now(timezone.utc).timestamp())


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _consume_outcome(task: "asyncio.Task[AnalysisResult]") -> None:
    if not task.cancelled():
        task.exception()


class ChainAnalyzer:
    """Exploit and vulnerability analysis over a chain data source."""

    def __init__(
        self,
        data_source: ChainDataSource,
        config: Optional[Settings] = None,
        registry: Optional[DetectorRegistry] = None,
        scanner: Optional[BytecodeScanner] = None,
        cache: Optional[ResultCache] = None,
    ) -> None:
        self.data_source = data_source
        self.config = config or default_settings
        self.normalizer = EvidenceNormalizer()
        self.registry = registry if registry is not None else DetectorRegistry()
        self.differ = StateChangeDiffer()
        self.scanner = scanner if scanner is not None else BytecodeScanner()
        self.cache: ResultCache[str, AnalysisResult] = (
            cache if cache is not None else ResultCache(self.config.CACHE_MAX_ENTRIES)
        )
        self._in_flight: Dict[str, "asyncio.Task[AnalysisResult]"] = {}

    async def analyze_transaction(self, request: AnalysisRequest) -> AnalysisResult:
        """Analyze one transaction, returning the cached result when present.

        Raises:
            InputValidationError: If the signature is malformed
            UpstreamFetchError: If the transaction cannot be fetched
        """
        signature = validate_signature(request.signature)

        # TODO: scope the key by network once replayed signatures across clusters need separating.
        cached = self.cache.get(signature)
        if cached is not None:
            logger.debug("Cache hit for signature: %s", signature)
            return cached

        task = self._in_flight.get(signature)
        if task is None:
            network = (request.network or self.config.DEFAULT_NETWORK).value
            task = asyncio.ensure_future(self._analyze_and_cache(signature, network))
            # Retrieve the outcome even when every waiter has been cancelled.
            task.add_done_callback(_consume_outcome)
            self._in_flight[signature] = task
        else:
            logger.debug("Joining in-flight analysis for signature: %s", signature)

        # A cancelled waiter must not cancel the shared computation.
        return await asyncio.shield(task)

    async def _analyze_and_cache(self, signature: str, network: str) -> AnalysisResult:
        try:
            result = await self._analyze(signature, network)
            self.cache.put(signature, result)
            return result
        finally:
            self._in_flight.pop(signature, None)

    async def _analyze(self, signature: str, network: str) -> AnalysisResult:
        start = time.perf_counter()
        logger.info("Analyzing transaction: %s", signature)

        record = await self.data_source.fetch_transaction(signature)

        trace = self.normalizer.normalize(record)
        exploits = self.registry.detect(record, trace)
        state_changes = self.differ.diff(record)
        risk_score = transaction_risk_score(exploits, state_changes)
        duration_ms = _elapsed_ms(start)

        result = AnalysisResult(
            risk_score=risk_score,
            exploits=tuple(exploits),
            state_changes=tuple(state_changes),
            execution_trace=trace,
            metadata=AnalysisMetadata(
                timestamp=_now(),
                duration_ms=duration_ms,
                analyzer_version=__version__,
                network=network,
            ),
        )

        logger.info(
            "Analysis complete for %s - Risk Score: %.2f, Duration: %dms",
            signature, risk_score, duration_ms,
        )
        return result

    async def audit_contract(self, request: ContractAuditRequest) -> ContractAuditResult:
        """Scan a deployed program's bytecode. Results are not cached.

        Raises:
            InputValidationError: If the program id is malformed
            UpstreamFetchError: If the program account cannot be fetched
            NotExecutableError: If the account holds no program
        """
        program_id = validate_public_key(request.program_id)
        start = time.perf_counter()
        logger.info("Auditing contract: %s", program_id)

        account = await self.data_source.fetch_account(program_id)
        if not account.executable:
            raise NotExecutableError(program_id)

        vulnerabilities = self.scanner.scan(account.data)
        instructions_analyzed = 0
        if self.config.ENABLE_INSTRUCTION_SAMPLING and self.config.AUDIT_SIGNATURE_SAMPLE > 0:
            instructions_analyzed = await self._count_recent_instructions(program_id)

        risk_score = contract_risk_score(vulnerabilities)
        duration_ms = _elapsed_ms(start)

        result = ContractAuditResult(
            program_id=program_id,
            risk_score=risk_score,
            vulnerabilities=tuple(vulnerabilities),
            code_quality=code_quality(account.data, vulnerabilities),
            recommendations=tuple(recommendations_for(vulnerabilities)),
            metadata=AuditMetadata(
                timestamp=_now(),
                duration_ms=duration_ms,
                instructions_analyzed=instructions_analyzed,
                depth=request.depth,
            ),
        )

        logger.info(
            "Audit complete for %s - Risk Score: %.2f, Duration: %dms",
            program_id, risk_score, duration_ms,
        )
        return result

    async def _count_recent_instructions(self, program_id: str) -> int:
        """Best-effort instruction count over the program's recent transactions."""
        limit = self.config.AUDIT_SIGNATURE_SAMPLE
        try:
            signatures: List[str] = await self.data_source.list_signatures_for_address(program_id, limit)
        except UpstreamFetchError as e:
            logger.warning("Signature sampling unavailable for %s: %s", program_id, e)
            signatures = []
        semaphore = asyncio.Semaphore(self.config.AUDIT_FETCH_CONCURRENCY)

        async def count(signature: str) -> int:
            async with semaphore:
                try:
                    record = await self.data_source.fetch_transaction(signature)
                except UpstreamFetchError as e:
                    logger.debug("Skipping signature %s during sampling: %s", signature, e)
                    return 0
            return record.instruction_count

        counts = await asyncio.gather(*(count(sig) for sig in signatures[:limit]))
        return sum(counts)
