"""Pydantic schemas for API requests and responses.

JSON field names are camelCase (brandName, overallPass, ...) to match
existing API consumers.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..services.verification import (
    LabelFields,
    FieldVerification as DomainFieldVerification,
    VerificationResult as DomainVerificationResult,
)
from ..services.extraction import NOT_FOUND, ERROR


class CamelModel(BaseModel):
    """Base model serializing snake_case attributes as camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpectedValues(CamelModel):
    """Values the label is required to show."""
    brand_name: str
    class_type: str
    alcohol_content: str
    net_contents: str
    government_warning: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "brandName": "Stone's Throw",
                "classType": "Kentucky Straight Bourbon Whiskey",
                "alcoholContent": "45% Alc./Vol. (90 Proof)",
                "netContents": "750 mL",
                "governmentWarning": "GOVERNMENT WARNING: (1) According to the Surgeon General, ...",
            }
        },
    )

    @field_validator("*")
    @classmethod
    def reject_sentinels(cls, value: str) -> str:
        if value in (NOT_FOUND, ERROR):
            raise ValueError(f'"{value}" is reserved and cannot be an expected value')
        return value

    def to_fields(self) -> LabelFields:
        return LabelFields(
            brand_name=self.brand_name,
            class_type=self.class_type,
            alcohol_content=self.alcohol_content,
            net_contents=self.net_contents,
            government_warning=self.government_warning,
        )


class ExtractedValues(CamelModel):
    """Fields read from the label image. "NOT FOUND" = absent or illegible."""
    brand_name: str
    class_type: str
    alcohol_content: str
    net_contents: str
    government_warning: str

    @classmethod
    def from_fields(cls, fields: Optional[LabelFields]) -> "ExtractedValues":
        """Serialize extracted fields; None (failed item) becomes all "ERROR"."""
        if fields is None:
            return cls(
                brand_name=ERROR,
                class_type=ERROR,
                alcohol_content=ERROR,
                net_contents=ERROR,
                government_warning=ERROR,
            )

        def wire(value: Optional[str]) -> str:
            return NOT_FOUND if value is None else value

        return cls(
            brand_name=wire(fields.brand_name),
            class_type=wire(fields.class_type),
            alcohol_content=wire(fields.alcohol_content),
            net_contents=wire(fields.net_contents),
            government_warning=wire(fields.government_warning),
        )


class FieldVerification(CamelModel):
    """Verdict for a single field."""
    match: bool
    confidence: int = Field(ge=0, le=100)
    note: Optional[str] = None

    @classmethod
    def from_domain(cls, verdict: DomainFieldVerification) -> "FieldVerification":
        return cls(match=verdict.match, confidence=verdict.confidence, note=verdict.note)


class VerificationResult(CamelModel):
    """Verdicts for all five fields."""
    brand_name: FieldVerification
    class_type: FieldVerification
    alcohol_content: FieldVerification
    net_contents: FieldVerification
    government_warning: FieldVerification

    @classmethod
    def from_domain(cls, result: DomainVerificationResult) -> "VerificationResult":
        return cls(
            brand_name=FieldVerification.from_domain(result.brand_name),
            class_type=FieldVerification.from_domain(result.class_type),
            alcohol_content=FieldVerification.from_domain(result.alcohol_content),
            net_contents=FieldVerification.from_domain(result.net_contents),
            government_warning=FieldVerification.from_domain(result.government_warning),
        )


class VerificationRequest(CamelModel):
    """Request body for single label verification."""
    image: str = Field(..., min_length=1, description="Base64 image, optionally a data URL")
    expected: ExpectedValues


class VerificationResponse(CamelModel):
    """Response for a single label (also one entry of a batch response)."""
    success: bool
    overall_pass: bool
    processing_time_seconds: float
    extracted: ExtractedValues
    verification: VerificationResult
    mismatches: list[str]
    error: Optional[str] = None


class BatchVerificationRequest(CamelModel):
    """Request body for batch verification: one expected-values entry per image."""
    images: list[str]
    expected_values: list[ExpectedValues]


class BatchSummary(CamelModel):
    total: int
    passed: int
    failed: int


class BatchVerificationResponse(CamelModel):
    """Response for batch verification."""
    success: bool
    summary: BatchSummary
    results: list[VerificationResponse]
    processing_time_seconds: float


class ErrorResponse(CamelModel):
    """Standard error response."""
    success: bool = False
    error: str
    processing_time_seconds: Optional[float] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Invalid image format. Supported: JPEG, PNG, WEBP",
            }
        },
    )


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    openai_configured: bool
    requests_remaining: int
