"""API route definitions."""

import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from ..models import (
    VerificationRequest,
    VerificationResponse,
    VerificationResult,
    ExtractedValues,
    BatchVerificationRequest,
    BatchVerificationResponse,
    BatchSummary,
    ErrorResponse,
    HealthResponse,
)
from ..services import (
    ImagePreprocessor,
    LabelExtractor,
    VerificationPipeline,
    BatchProcessor,
    BatchItemResult,
    BatchValidationError,
    QuotaService,
)
from .dependencies import (
    get_image_preprocessor,
    get_label_extractor,
    get_verification_pipeline,
    get_batch_processor,
    get_quota_service,
    enforce_quota,
)
from .. import __version__

logger = logging.getLogger(__name__)
router = APIRouter()


def error_response(status_code: int, error: str, start_time: float | None = None) -> JSONResponse:
    """JSON error envelope: {"success": false, "error": ..., "processingTimeSeconds": ...}."""
    body = ErrorResponse(
        error=error,
        processing_time_seconds=round(time.time() - start_time, 2) if start_time else None,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def _item_response(item: BatchItemResult) -> VerificationResponse:
    return VerificationResponse(
        success=item.success,
        overall_pass=item.overall_pass,
        processing_time_seconds=item.processing_time_seconds,
        extracted=ExtractedValues.from_fields(item.extracted),
        verification=VerificationResult.from_domain(item.verification),
        mismatches=item.mismatches,
        error=item.error,
    )


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(
    extractor: LabelExtractor = Depends(get_label_extractor),
    quota: QuotaService = Depends(get_quota_service),
):
    """Check API health, extraction configuration and remaining quota."""
    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        openai_configured=extractor.is_configured,
        requests_remaining=quota.remaining,
    )


@router.post(
    "/verify-label",
    response_model=VerificationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        429: {"model": ErrorResponse, "description": "Request quota exceeded"},
        500: {"model": ErrorResponse, "description": "Processing error"},
    },
    dependencies=[Depends(enforce_quota)],
    tags=["Verification"],
)
async def verify_label(
    request: VerificationRequest,
    preprocessor: ImagePreprocessor = Depends(get_image_preprocessor),
    pipeline: VerificationPipeline = Depends(get_verification_pipeline),
):
    """
    Verify a single label image against expected values.

    The image is sent base64 encoded (optionally as a data URL). Returns
    per-field verdicts, the extracted text and a list of mismatches.
    """
    start_time = time.time()

    if not preprocessor.is_valid_format(request.image):
        return error_response(400, "Invalid image format. Supported: JPEG, PNG, WEBP")

    try:
        outcome = await pipeline.run(request.image, request.expected.to_fields())
    except Exception as e:
        logger.exception(f"Error in verify-label: {e}")
        return error_response(500, str(e) or "Internal server error", start_time)

    return VerificationResponse(
        success=True,
        overall_pass=outcome.overall_pass,
        processing_time_seconds=round(time.time() - start_time, 2),
        extracted=ExtractedValues.from_fields(outcome.extracted),
        verification=VerificationResult.from_domain(outcome.verification),
        mismatches=outcome.mismatches,
    )


@router.post(
    "/verify-batch",
    response_model=BatchVerificationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        429: {"model": ErrorResponse, "description": "Request quota exceeded"},
        500: {"model": ErrorResponse, "description": "Processing error"},
    },
    dependencies=[Depends(enforce_quota)],
    tags=["Verification"],
)
async def verify_batch(
    request: BatchVerificationRequest,
    batch_processor: BatchProcessor = Depends(get_batch_processor),
):
    """
    Verify up to 50 label images, each against its own expected values.

    `images[i]` is checked against `expectedValues[i]`. Labels are processed
    concurrently (at most 5 at a time); a failure on one image is reported in
    its own result without affecting the others.
    """
    start_time = time.time()

    try:
        outcome = await batch_processor.process_batch(
            request.images,
            [expected.to_fields() for expected in request.expected_values],
        )
    except BatchValidationError as e:
        return error_response(400, str(e))
    except Exception as e:
        logger.exception(f"Error in verify-batch: {e}")
        return error_response(500, str(e) or "Internal server error", start_time)

    return BatchVerificationResponse(
        success=True,
        summary=BatchSummary(
            total=outcome.summary.total,
            passed=outcome.summary.passed,
            failed=outcome.summary.failed,
        ),
        results=[_item_response(item) for item in outcome.results],
        processing_time_seconds=round(time.time() - start_time, 2),
    )
