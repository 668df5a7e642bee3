"""Label field extraction using an OpenAI vision model.

The model reads the label image and returns the five regulated fields as a
JSON object, copied exactly as printed. Anything it cannot read comes back as
"NOT FOUND", which is mapped to None here.
"""

import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from .verification import LabelFields, FIELD_NAMES
from ..config import get_settings

logger = logging.getLogger(__name__)

NOT_FOUND = "NOT FOUND"
# Reserved for fields of a batch item whose pipeline failed
ERROR = "ERROR"

# JSON keys returned by the model, keyed by LabelFields attribute
RESPONSE_KEYS = {
    "brand_name": "brandName",
    "class_type": "classType",
    "alcohol_content": "alcoholContent",
    "net_contents": "netContents",
    "government_warning": "governmentWarning",
}

EXTRACTION_PROMPT = """You are analyzing an alcohol beverage label. Extract the following information EXACTLY as it appears on the label:

1. Brand Name
2. Class/Type (e.g., "Kentucky Straight Bourbon Whiskey", "Premium Vodka")
3. Alcohol Content (e.g., "40% Alc./Vol.", "80 Proof")
4. Net Contents (e.g., "750 mL", "1 L")
5. Government Warning (the complete warning text - this is CRITICAL)

Return ONLY a JSON object with these exact keys (no other text):
{
  "brandName": "...",
  "classType": "...",
  "alcoholContent": "...",
  "netContents": "...",
  "governmentWarning": "..."
}

IMPORTANT:
- Extract text EXACTLY as shown, preserving capitalization and punctuation
- For the government warning, include the complete text starting with "GOVERNMENT WARNING:"
- If any field is not visible or unclear, use "NOT FOUND" as the value"""


class ExtractionError(RuntimeError):
    """Raised when the extraction model cannot be reached or returns nothing."""


def _strip_code_fences(content: str) -> str:
    """Remove Markdown code fences the model sometimes wraps JSON in."""
    text = content.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1:] if first_newline != -1 else text[3:]
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _field_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    if not text or text == NOT_FOUND:
        return None
    if text == ERROR:
        logger.warning(f"Model returned reserved value \"{ERROR}\"; treating field as not found")
        return None
    return text


def parse_extracted_data(content: str) -> LabelFields:
    """
    Parse the model's reply into LabelFields.

    Never raises: a reply that is not a JSON object (e.g. the model explaining
    that the image is not a label) yields all fields not found.
    """
    text = _strip_code_fences(content)

    if not text.startswith("{"):
        logger.warning(f"Model could not extract label data. Response: {text[:200]}")
        return LabelFields.not_found()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing extracted data: {e}. Content: {text[:500]}")
        return LabelFields.not_found()

    if not isinstance(parsed, dict):
        logger.error(f"Extracted data is not a JSON object: {text[:500]}")
        return LabelFields.not_found()

    missing = [key for key in RESPONSE_KEYS.values() if key not in parsed]
    if missing:
        logger.error(f"Extracted data missing required fields: {', '.join(missing)}")
        return LabelFields.not_found()

    return LabelFields(**{
        attr: _field_value(parsed[RESPONSE_KEYS[attr]]) for attr, _ in FIELD_NAMES
    })


class LabelExtractor:
    """Reads label fields from an image with a vision model."""

    def __init__(self, client: Optional[AsyncOpenAI] = None):
        self.settings = get_settings()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.settings.openai_api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise ExtractionError("OPENAI_API_KEY is not set")
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.extraction_timeout_seconds,
            )
        return self._client

    async def extract_label_info(self, image_base64: str) -> LabelFields:
        """
        Extract label fields from a JPEG image.

        Args:
            image_base64: Base64 JPEG without data URL prefix

        Returns:
            LabelFields with None for anything not visible on the label

        Raises:
            ExtractionError: If the model call fails or returns no content
        """
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:image/jpeg;base64,{image_base64}"},
                            },
                        ],
                    }
                ],
                max_tokens=self.settings.extraction_max_tokens,
                temperature=0,
            )
        except Exception as e:
            logger.error(f"Error extracting label info: {e}")
            raise ExtractionError(f"Failed to extract label information: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("Failed to extract label information: no response from model")

        return parse_extracted_data(content)
