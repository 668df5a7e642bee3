"""Shared test fixtures."""

import base64
import io
import json
from types import SimpleNamespace

import pytest
from PIL import Image

from label_verifier.services import LabelFields


GOVERNMENT_WARNING = (
    "GOVERNMENT WARNING: (1) According to the Surgeon General, women should not drink "
    "alcoholic beverages during pregnancy because of the risk of birth defects. "
    "(2) Consumption of alcoholic beverages impairs your ability to drive a car or "
    "operate machinery, and may cause health problems."
)

LABEL_VALUES = {
    "brand_name": "Stone's Throw",
    "class_type": "Kentucky Straight Bourbon Whiskey",
    "alcohol_content": "45% Alc./Vol. (90 Proof)",
    "net_contents": "750 mL",
    "government_warning": GOVERNMENT_WARNING,
}


class FakeCompletions:
    """Stands in for client.chat.completions, recording every call."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAIClient:
    """Minimal AsyncOpenAI double: only chat.completions.create is used."""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def warning_text():
    return GOVERNMENT_WARNING


@pytest.fixture
def make_fields():
    """Factory for the standard bourbon label fields with per-field overrides."""
    def _make(**overrides) -> LabelFields:
        values = dict(LABEL_VALUES)
        values.update(overrides)
        return LabelFields(**values)
    return _make


@pytest.fixture
def expected_fields(make_fields):
    return make_fields()


@pytest.fixture
def expected_payload():
    """Expected values as camelCase JSON, as API clients send them."""
    return {
        "brandName": LABEL_VALUES["brand_name"],
        "classType": LABEL_VALUES["class_type"],
        "alcoholContent": LABEL_VALUES["alcohol_content"],
        "netContents": LABEL_VALUES["net_contents"],
        "governmentWarning": LABEL_VALUES["government_warning"],
    }


@pytest.fixture
def model_reply(expected_payload):
    """A well-formed extraction reply matching the standard label."""
    return json.dumps(expected_payload)


@pytest.fixture
def make_image():
    """Factory encoding a plain image as base64, by default a PNG data URL."""
    def _make(size=(300, 200), image_format="PNG", mode="RGB", data_url=True) -> str:
        color = (255, 255, 255, 0) if mode == "RGBA" else "white"
        img = Image.new(mode, size, color=color)
        buffer = io.BytesIO()
        img.save(buffer, format=image_format)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        if data_url:
            return f"data:image/{image_format.lower()};base64,{encoded}"
        return encoded
    return _make


@pytest.fixture
def decode_image():
    """Open a base64 image (no data URL prefix) with Pillow."""
    def _decode(image_base64: str) -> Image.Image:
        return Image.open(io.BytesIO(base64.b64decode(image_base64)))
    return _decode


@pytest.fixture
def make_openai_client():
    """Factory for fake OpenAI clients with a canned reply or error."""
    return FakeOpenAIClient


@pytest.fixture
def fake_openai_client(model_reply):
    return FakeOpenAIClient(content=model_reply)
