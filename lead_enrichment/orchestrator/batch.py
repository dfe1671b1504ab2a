"""Batched, throttled enrichment of many contacts."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from ..models import BatchError, BatchResult, EnrichmentOutcome, NormalizedContact

LOGGER = logging.getLogger(__name__)

EnrichFunction = Callable[[NormalizedContact], Awaitable[EnrichmentOutcome]]
ProgressCallback = Callable[[int, int], None]

DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY_SECONDS = 1.0


class BatchRunner:
    """Enrich contacts chunk by chunk.

    Contacts inside a chunk are enriched concurrently; chunks run one after
    another with a fixed pause in between to stay under downstream rate
    limits. There is no timeout: a lookup that never returns holds up its
    chunk.
    """

    def __init__(
        self,
        enrich: EnrichFunction,
        *,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._enrich = enrich
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    async def enrich_batch(
        self,
        contacts: Sequence[NormalizedContact],
        batch_size: int = DEFAULT_BATCH_SIZE,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BatchResult:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        result = BatchResult()
        total = len(contacts)
        for start in range(0, total, batch_size):
            chunk = list(contacts[start : start + batch_size])
            batch_number = start // batch_size
            try:
                await self._run_chunk(chunk, start, result)
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("Batch %s failed", batch_number)
                result.errors.append(
                    BatchError(error_message=str(exc) or exc.__class__.__name__, index=start, batch=batch_number)
                )

            processed = min(start + batch_size, total)
            LOGGER.info(
                "Batch %s done: %s/%s contacts, %s errors so far",
                batch_number,
                processed,
                total,
                result.total_errors,
            )
            if progress_callback is not None:
                progress_callback(processed, total)

            if start + batch_size < total and self._delay_seconds > 0:
                await self._sleep(self._delay_seconds)

        return result

    async def _run_chunk(self, chunk: List[NormalizedContact], offset: int, result: BatchResult) -> None:
        settled = await asyncio.gather(
            *(self._enrich(contact) for contact in chunk),
            return_exceptions=True,
        )
        for position, (contact, outcome) in enumerate(zip(chunk, settled)):
            index = offset + position
            if isinstance(outcome, BaseException):
                message = str(outcome) or outcome.__class__.__name__
            elif not outcome.success:
                message = outcome.error_message or "Enrichment failed"
            else:
                result.outcomes.append(outcome)
                continue
            result.errors.append(BatchError(error_message=message, index=index, contact=contact))
