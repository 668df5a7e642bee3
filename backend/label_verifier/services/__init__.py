"""Services for image processing, extraction, verification, and batch processing."""

from .similarity import ratio, partial_ratio
from .preprocessing import ImagePreprocessor, ImageProcessingError
from .extraction import LabelExtractor, ExtractionError, parse_extracted_data
from .verification import (
    VerificationService,
    VerificationResult,
    FieldVerification,
    LabelFields,
    extract_alcohol_percentage,
    parse_net_contents,
)
from .pipeline import VerificationPipeline, LabelVerification
from .batch import (
    BatchProcessor,
    BatchItemResult,
    BatchSummary,
    BatchOutcome,
    BatchValidationError,
    validate_batch,
)
from .quota import QuotaService, QuotaExceededError

__all__ = [
    "ratio",
    "partial_ratio",
    "ImagePreprocessor",
    "ImageProcessingError",
    "LabelExtractor",
    "ExtractionError",
    "parse_extracted_data",
    "VerificationService",
    "VerificationResult",
    "FieldVerification",
    "LabelFields",
    "extract_alcohol_percentage",
    "parse_net_contents",
    "VerificationPipeline",
    "LabelVerification",
    "BatchProcessor",
    "BatchItemResult",
    "BatchSummary",
    "BatchOutcome",
    "BatchValidationError",
    "validate_batch",
    "QuotaService",
    "QuotaExceededError",
]
