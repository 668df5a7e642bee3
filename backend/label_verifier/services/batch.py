"""Batch processing service for multiple label verification."""

import asyncio
import time
import logging
from typing import List, Optional, Sequence
from dataclasses import dataclass

from .pipeline import VerificationPipeline, LabelVerification
from .verification import LabelFields, VerificationResult
from ..config import get_settings

logger = logging.getLogger(__name__)

ERROR_MISMATCH = "Error processing image"


class BatchValidationError(ValueError):
    """Raised when a batch request is malformed; nothing has been processed."""


@dataclass
class BatchItemResult:
    """
    Result for one image in a batch.

    `extracted` is None when the item's pipeline failed; such items carry a
    verification with every field unmatched at zero confidence.
    """
    success: bool
    overall_pass: bool
    processing_time_seconds: float
    extracted: Optional[LabelFields]
    verification: VerificationResult
    mismatches: List[str]
    error: Optional[str] = None

    @classmethod
    def from_verification(cls, outcome: LabelVerification, elapsed: float) -> "BatchItemResult":
        return cls(
            success=True,
            overall_pass=outcome.overall_pass,
            processing_time_seconds=round(elapsed, 2),
            extracted=outcome.extracted,
            verification=outcome.verification,
            mismatches=outcome.mismatches,
        )

    @classmethod
    def failed(cls, error: str, elapsed: float) -> "BatchItemResult":
        return cls(
            success=False,
            overall_pass=False,
            processing_time_seconds=round(elapsed, 2),
            extracted=None,
            verification=VerificationResult.failed(),
            mismatches=[ERROR_MISMATCH],
            error=error,
        )


@dataclass
class BatchSummary:
    """Pass/fail counts for a batch."""
    total: int
    passed: int
    failed: int


@dataclass
class BatchOutcome:
    """Complete batch result, in input order."""
    summary: BatchSummary
    results: List[BatchItemResult]
    processing_time_seconds: float


def validate_batch(
    images: Sequence[str],
    expected_values: Sequence[LabelFields],
    max_batch_size: int,
) -> None:
    """
    Check batch request shape.

    Raises:
        BatchValidationError: If arrays are empty, differ in length, or
            exceed max_batch_size
    """
    if not images:
        raise BatchValidationError("Missing or invalid images array")
    if len(images) != len(expected_values):
        raise BatchValidationError("Number of images must match number of expected values")
    if len(images) > max_batch_size:
        raise BatchValidationError(f"Maximum {max_batch_size} images per batch")


class BatchProcessor:
    """
    Verify many labels with bounded concurrency.

    At most `concurrency` pipelines are in flight at once. A failure in one
    item becomes an error record for that item only; results keep input order.
    """

    def __init__(
        self,
        pipeline: VerificationPipeline,
        concurrency: Optional[int] = None,
        max_batch_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.pipeline = pipeline
        self.concurrency = concurrency or settings.batch_concurrency
        self.max_batch_size = max_batch_size or settings.max_batch_size

    async def process_batch(
        self,
        images: Sequence[str],
        expected_values: Sequence[LabelFields],
    ) -> BatchOutcome:
        """
        Process a batch of images with their expected values.

        Args:
            images: Base64 label images
            expected_values: Expected fields, one per image

        Returns:
            BatchOutcome with one result per image, in input order

        Raises:
            BatchValidationError: Before any processing, if the batch is malformed
        """
        validate_batch(images, expected_values, self.max_batch_size)

        start_time = time.time()
        semaphore = asyncio.Semaphore(self.concurrency)

        logger.info(f"Processing batch of {len(images)} labels (concurrency={self.concurrency})")

        results = await asyncio.gather(*(
            self._process_item(index, image, expected, semaphore)
            for index, (image, expected) in enumerate(zip(images, expected_values))
        ))

        passed = sum(1 for r in results if r.overall_pass)
        summary = BatchSummary(total=len(results), passed=passed, failed=len(results) - passed)
        processing_time = round(time.time() - start_time, 2)

        logger.info(
            f"Batch complete: {summary.passed}/{summary.total} passed ({processing_time}s)"
        )

        return BatchOutcome(
            summary=summary,
            results=list(results),
            processing_time_seconds=processing_time,
        )

    async def _process_item(
        self,
        index: int,
        image: str,
        expected: LabelFields,
        semaphore: asyncio.Semaphore,
    ) -> BatchItemResult:
        async with semaphore:
            start_time = time.time()
            try:
                outcome = await self.pipeline.run(image, expected)
            except Exception as e:
                logger.exception(f"Error processing batch item {index}: {e}")
                return BatchItemResult.failed(str(e) or "Processing failed", time.time() - start_time)

            return BatchItemResult.from_verification(outcome, time.time() - start_time)
