"""Single-label pipeline: preprocess -> extract -> verify."""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from .preprocessing import ImagePreprocessor
from .extraction import LabelExtractor
from .verification import LabelFields, VerificationResult, VerificationService

logger = logging.getLogger(__name__)


@dataclass
class LabelVerification:
    """Outcome of running one label image through the pipeline."""
    extracted: LabelFields
    verification: VerificationResult
    mismatches: List[str]
    overall_pass: bool


class VerificationPipeline:
    """Runs one label image through preprocessing, extraction and verification."""

    def __init__(
        self,
        preprocessor: ImagePreprocessor,
        extractor: LabelExtractor,
        verification_service: Optional[VerificationService] = None,
    ):
        self.preprocessor = preprocessor
        self.extractor = extractor
        self.verification_service = verification_service or VerificationService()

    async def run(self, image: str, expected: LabelFields) -> LabelVerification:
        """
        Verify one label image against expected values.

        Raises whatever preprocessing or extraction raises; callers decide
        whether that fails the request or just this item.
        """
        # Pillow work is CPU-bound, keep it off the event loop
        processed = await asyncio.to_thread(self.preprocessor.process_image, image)
        extracted = await self.extractor.extract_label_info(processed)

        verification = self.verification_service.verify(extracted, expected)
        mismatches = self.verification_service.get_mismatches(verification)
        overall_pass = self.verification_service.is_overall_pass(verification)

        logger.info(f"Label verified: overall_pass={overall_pass}, mismatches={len(mismatches)}")

        return LabelVerification(
            extracted=extracted,
            verification=verification,
            mismatches=mismatches,
            overall_pass=overall_pass,
        )
