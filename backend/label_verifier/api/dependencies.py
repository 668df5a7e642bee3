"""FastAPI dependencies wiring services into the routes."""

from functools import lru_cache

from fastapi import Depends, Request

from ..services import (
    ImagePreprocessor,
    LabelExtractor,
    VerificationPipeline,
    BatchProcessor,
    QuotaService,
)


@lru_cache
def get_image_preprocessor() -> ImagePreprocessor:
    return ImagePreprocessor()


@lru_cache
def get_label_extractor() -> LabelExtractor:
    return LabelExtractor()


def get_verification_pipeline(
    preprocessor: ImagePreprocessor = Depends(get_image_preprocessor),
    extractor: LabelExtractor = Depends(get_label_extractor),
) -> VerificationPipeline:
    return VerificationPipeline(preprocessor=preprocessor, extractor=extractor)


def get_batch_processor(
    pipeline: VerificationPipeline = Depends(get_verification_pipeline),
) -> BatchProcessor:
    return BatchProcessor(pipeline)


def get_quota_service(request: Request) -> QuotaService:
    """The application's quota counter, created with the app."""
    return request.app.state.quota


def enforce_quota(quota: QuotaService = Depends(get_quota_service)) -> None:
    """Count a verification request; raises QuotaExceededError when used up."""
    quota.acquire()
