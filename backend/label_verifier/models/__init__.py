"""Pydantic models for request/response schemas."""

from .schemas import (
    NOT_FOUND,
    ERROR,
    ExpectedValues,
    ExtractedValues,
    FieldVerification,
    VerificationResult,
    VerificationRequest,
    VerificationResponse,
    BatchVerificationRequest,
    BatchSummary,
    BatchVerificationResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "NOT_FOUND",
    "ERROR",
    "ExpectedValues",
    "ExtractedValues",
    "FieldVerification",
    "VerificationResult",
    "VerificationRequest",
    "VerificationResponse",
    "BatchVerificationRequest",
    "BatchSummary",
    "BatchVerificationResponse",
    "ErrorResponse",
    "HealthResponse",
]
