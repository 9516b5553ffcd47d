"""Shared test fixtures."""

import io
import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from PIL import Image

from meal_lens.config import Settings
from meal_lens.containers import AppContainer
from meal_lens.domain.analysis import AnalysisRequest
from meal_lens.services.analysis import FoodAnalysisService
from meal_lens.services.connectivity import StaticConnectivity
from meal_lens.services.credentials import CredentialStore
from meal_lens.services.demo import DemoAnalyzer
from meal_lens.services.images import ImagePreprocessor
from meal_lens.services.inference import InferenceClient, InferenceTransport
from meal_lens.services.records import RecordStore
from meal_lens.services.storage import KeyValueStore

VALID_KEY = "sk-test-0123456789abcdef"

ANALYSIS_PAYLOAD: dict[str, object] = {
    "meal_name": "Oatmeal with Berries",
    "total_calories": 350,
    "confidence": 0.81,
    "ingredients": [
        {
            "name": "Rolled Oats",
            "quantity": 60,
            "unit": "grams",
            "calories": 230,
            "protein": 8.0,
            "carbs": 40.5,
            "fat": 4.2,
        },
        {
            "name": "Blueberries",
            "quantity": 0.5,
            "unit": "cups",
            "calories": 42,
            "protein": 0.5,
            "carbs": 10.7,
            "fat": 0.2,
        },
        {
            "name": "Honey",
            "quantity": 1,
            "unit": "tbsp",
            "calories": 78,
            "protein": 0.1,
            "carbs": 21.0,
            "fat": 0.0,
        },
    ],
    "totals": {"calories": 350, "protein": 8.6, "carbs": 72.2, "fat": 4.4},
}


def completion_body(content: str) -> str:
    """Wrap model text in a chat completions response body."""
    return json.dumps(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
        }
    )


def analysis_body(fenced: bool = False) -> str:
    """Return a successful response body for ANALYSIS_PAYLOAD."""
    content = json.dumps(ANALYSIS_PAYLOAD)
    if fenced:
        content = f"```json\n{content}\n```"
    return completion_body(content)


def jpeg_bytes(size: tuple[int, int] = (64, 48), color=(200, 120, 40)) -> bytes:
    """Encode a solid-color JPEG."""
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="JPEG")
    return output.getvalue()


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class FakeTransport(InferenceTransport):
    """Transport returning queued bodies or raising queued errors."""

    outcomes: list[object] = field(default_factory=list)
    requests: list[tuple[AnalysisRequest, str]] = field(default_factory=list)

    async def send(self, request: AnalysisRequest, api_key: str) -> str:
        self.requests.append((request, api_key))
        outcome = self.outcomes.pop(0) if self.outcomes else analysis_body()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        storage_backend="file",
        storage_path=str(tmp_path / "storage.json"),
        retry_delay_seconds=0,
        demo_delay_seconds=0,
        connectivity_probe_url="https://probe.test",
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def credential_store(storage: InMemoryKeyValueStore) -> CredentialStore:
    return CredentialStore(storage)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connectivity() -> StaticConnectivity:
    return StaticConnectivity(available=True)


@pytest.fixture
def analysis_service(
    credential_store: CredentialStore,
    connectivity: StaticConnectivity,
    transport: FakeTransport,
) -> FoodAnalysisService:
    return FoodAnalysisService(
        credential_store=credential_store,
        connectivity=connectivity,
        preprocessor=ImagePreprocessor(),
        inference_client=InferenceClient(transport=transport, retry_delay_seconds=0),
        demo_analyzer=DemoAnalyzer(delay_seconds=0),
    )


@pytest.fixture
def container(
    settings: Settings,
    storage: InMemoryKeyValueStore,
    credential_store: CredentialStore,
    connectivity: StaticConnectivity,
    analysis_service: FoodAnalysisService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        storage=storage,
        credential_store=credential_store,
        connectivity=connectivity,
        analysis_service=analysis_service,
        record_store=RecordStore(storage),
        close_resources=close_resources,
    )
