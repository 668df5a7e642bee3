"""Verification service for comparing extracted label fields against expected values."""

import re
from typing import Optional, List, Tuple, Iterator
from dataclasses import dataclass
import logging

from .similarity import ratio, partial_ratio

logger = logging.getLogger(__name__)


# Field attribute names paired with their human-readable labels, in report order
FIELD_NAMES: Tuple[Tuple[str, str], ...] = (
    ("brand_name", "Brand Name"),
    ("class_type", "Class/Type"),
    ("alcohol_content", "Alcohol Content"),
    ("net_contents", "Net Contents"),
    ("government_warning", "Government Warning"),
)

# Thresholds (0-100 similarity scale)
BRAND_RATIO_THRESHOLD = 90
BRAND_PARTIAL_THRESHOLD = 95
CLASS_TYPE_THRESHOLD = 85
ABV_FUZZY_THRESHOLD = 85
ABV_TOLERANCE = 0.5
ABV_NUMERIC_CONFIDENCE = 98
NET_CONTENTS_THRESHOLD = 90
NET_CONTENTS_EPSILON = 0.01
NET_CONTENTS_UNIT_CONFIDENCE = 99
WARNING_CLOSE_THRESHOLD = 70

_PERCENT_PATTERN = re.compile(r"(\d+\.?\d*)\s*%")
_ABV_PATTERN = re.compile(r"(\d+\.?\d*)\s*(?:alc\.?/vol\.?|abv)", re.IGNORECASE)
_PROOF_PATTERN = re.compile(r"(\d+\.?\d*)\s*proof", re.IGNORECASE)
_NET_CONTENTS_PATTERN = re.compile(r"(\d+\.?\d*)\s*(ml|l|oz|fl\.?\s?oz|gal)", re.IGNORECASE)


@dataclass
class LabelFields:
    """
    The five regulated label fields.

    For extracted values a field is None when it was absent or illegible
    on the label.
    """
    brand_name: Optional[str]
    class_type: Optional[str]
    alcohol_content: Optional[str]
    net_contents: Optional[str]
    government_warning: Optional[str]

    @classmethod
    def not_found(cls) -> "LabelFields":
        return cls(None, None, None, None, None)


@dataclass
class FieldVerification:
    """Result of verifying a single field."""
    match: bool
    confidence: int
    note: Optional[str] = None


@dataclass
class VerificationResult:
    """Per-field verdicts for one label."""
    brand_name: FieldVerification
    class_type: FieldVerification
    alcohol_content: FieldVerification
    net_contents: FieldVerification
    government_warning: FieldVerification

    def items(self) -> Iterator[Tuple[str, FieldVerification]]:
        """Yield (human-readable field name, verdict) in report order."""
        for attr, label in FIELD_NAMES:
            yield label, getattr(self, attr)

    @classmethod
    def failed(cls) -> "VerificationResult":
        """All five fields unmatched with zero confidence."""
        return cls(*(FieldVerification(match=False, confidence=0) for _ in FIELD_NAMES))


def extract_alcohol_percentage(text: str) -> Optional[float]:
    """
    Pull an ABV percentage out of free label text.

    Tries "45%", then "45 Alc./Vol." / "45 ABV", then "90 Proof" (halved).
    Returns None if no pattern matches.
    """
    match = _PERCENT_PATTERN.search(text)
    if match:
        return float(match.group(1))

    match = _ABV_PATTERN.search(text)
    if match:
        return float(match.group(1))

    match = _PROOF_PATTERN.search(text)
    if match:
        return float(match.group(1)) / 2

    return None


def parse_net_contents(text: str) -> Optional[Tuple[float, str]]:
    """
    Parse "750 mL" style text into (value, unit).

    Unit is lowercased with internal whitespace removed ("fl oz" -> "floz").
    """
    match = _NET_CONTENTS_PATTERN.search(text)
    if not match:
        return None
    unit = re.sub(r"\s", "", match.group(2).lower())
    return float(match.group(1)), unit


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _quote_both(expected: str, extracted: str) -> str:
    return f'Expected "{expected}", found "{extracted}"'


class VerificationService:
    """Compares extracted label fields against expected application values."""

    def verify(self, extracted: LabelFields, expected: LabelFields) -> VerificationResult:
        """
        Verify all five fields.

        Args:
            extracted: Fields read from the label (None = not found)
            expected: Values the label is required to show

        Returns:
            VerificationResult with one verdict per field
        """
        result = VerificationResult(
            brand_name=self._verify_brand(extracted.brand_name, expected.brand_name),
            class_type=self._verify_class_type(extracted.class_type, expected.class_type),
            alcohol_content=self._verify_alcohol_content(
                extracted.alcohol_content, expected.alcohol_content
            ),
            net_contents=self._verify_net_contents(extracted.net_contents, expected.net_contents),
            government_warning=self._verify_warning(
                extracted.government_warning, expected.government_warning
            ),
        )

        logger.debug(
            "Verification: "
            + ", ".join(f"{name}={v.match}/{v.confidence}" for name, v in result.items())
        )
        return result

    def get_mismatches(self, result: VerificationResult) -> List[str]:
        """One explanation per unmatched field, in report order."""
        return [
            f"{name}: {verdict.note or 'Mismatch'}"
            for name, verdict in result.items()
            if not verdict.match
        ]

    def is_overall_pass(self, result: VerificationResult) -> bool:
        """True only when every field matched."""
        return all(verdict.match for _, verdict in result.items())

    def _verify_brand(self, extracted: Optional[str], expected: str) -> FieldVerification:
        """
        Verify brand name.

        Handles case differences like "STONE'S THROW" vs "Stone's Throw" and
        extra text around the brand ("Weller" vs "Weller Special Reserve").
        """
        if extracted is None:
            return FieldVerification(False, 0, "Brand name not found on label")

        if extracted.lower() == expected.lower():
            note = "Case difference acceptable" if extracted != expected else None
            return FieldVerification(True, 100, note)

        similarity = ratio(extracted.lower(), expected.lower())
        if similarity >= BRAND_RATIO_THRESHOLD:
            return FieldVerification(
                True, similarity, "Minor differences detected but within acceptable range"
            )

        partial = partial_ratio(extracted.lower(), expected.lower())
        if partial >= BRAND_PARTIAL_THRESHOLD:
            return FieldVerification(True, partial, "Partial match - one may be substring of other")

        return FieldVerification(False, similarity, _quote_both(expected, extracted))

    def _verify_class_type(self, extracted: Optional[str], expected: str) -> FieldVerification:
        if extracted is None:
            return FieldVerification(False, 0, "Class/type not found on label")

        if extracted.lower() == expected.lower():
            return FieldVerification(True, 100)

        similarity = ratio(extracted.lower(), expected.lower())
        if similarity >= CLASS_TYPE_THRESHOLD:
            return FieldVerification(True, similarity, "Minor differences in wording")

        return FieldVerification(False, similarity, _quote_both(expected, extracted))

    def _verify_alcohol_content(self, extracted: Optional[str], expected: str) -> FieldVerification:
        """
        Verify alcohol content.

        "45%", "45% Alc./Vol." and "90 Proof" are all the same ABV.
        Tolerance: ±0.5 percentage points.
        """
        if extracted is None:
            return FieldVerification(False, 0, "Alcohol content not found on label")

        if extracted == expected:
            return FieldVerification(True, 100)

        extracted_abv = extract_alcohol_percentage(extracted)
        expected_abv = extract_alcohol_percentage(expected)
        if extracted_abv is not None and expected_abv is not None:
            if abs(extracted_abv - expected_abv) <= ABV_TOLERANCE:
                return FieldVerification(
                    True, ABV_NUMERIC_CONFIDENCE, "ABV matches (formatting differences acceptable)"
                )

        similarity = ratio(extracted.lower(), expected.lower())
        if similarity >= ABV_FUZZY_THRESHOLD:
            return FieldVerification(True, similarity, "Format differs but content similar")

        return FieldVerification(False, similarity, _quote_both(expected, extracted))

    def _verify_net_contents(self, extracted: Optional[str], expected: str) -> FieldVerification:
        """Verify net contents. Handles "750 mL" vs "750mL" vs "750 ML"."""
        if extracted is None:
            return FieldVerification(False, 0, "Net contents not found on label")

        normalized_extracted = _collapse_whitespace(extracted.lower())
        normalized_expected = _collapse_whitespace(expected.lower())

        if normalized_extracted == normalized_expected:
            return FieldVerification(True, 100)

        extracted_parsed = parse_net_contents(extracted)
        expected_parsed = parse_net_contents(expected)
        if extracted_parsed and expected_parsed:
            extracted_value, extracted_unit = extracted_parsed
            expected_value, expected_unit = expected_parsed
            if (
                abs(extracted_value - expected_value) < NET_CONTENTS_EPSILON
                and extracted_unit == expected_unit
            ):
                return FieldVerification(
                    True, NET_CONTENTS_UNIT_CONFIDENCE, "Formatting difference acceptable"
                )

        similarity = ratio(normalized_extracted, normalized_expected)
        if similarity >= NET_CONTENTS_THRESHOLD:
            return FieldVerification(True, similarity)

        return FieldVerification(False, similarity, _quote_both(expected, extracted))

    def _verify_warning(self, extracted: Optional[str], expected: str) -> FieldVerification:
        """
        Verify government warning.

        Strict: case-sensitive, word-for-word. Only whitespace differences are
        tolerated; similarity never produces a match.
        """
        if extracted is None:
            return FieldVerification(False, 0, "Government warning not found on label - REQUIRED")

        normalized_extracted = _collapse_whitespace(extracted)
        normalized_expected = _collapse_whitespace(expected)

        if normalized_extracted == normalized_expected:
            return FieldVerification(True, 100)

        if (
            "government warning:" in normalized_extracted
            and "GOVERNMENT WARNING:" not in normalized_extracted
        ):
            return FieldVerification(False, 0, 'Must be "GOVERNMENT WARNING:" in all caps')

        similarity = ratio(normalized_extracted, normalized_expected)
        if similarity > WARNING_CLOSE_THRESHOLD:
            return FieldVerification(
                False,
                similarity,
                "Government warning text does not match exactly - must be word-for-word",
            )

        return FieldVerification(
            False, similarity, "Government warning is incorrect or missing required text"
        )
