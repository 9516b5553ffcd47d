"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_lens.adapters.httpx_connectivity_monitor import HttpxConnectivityMonitor
from meal_lens.adapters.json_file_store import JsonFileKeyValueStore
from meal_lens.adapters.openai_inference_transport import OpenAIInferenceTransport
from meal_lens.adapters.supabase_kv_store import SupabaseKeyValueStore
from meal_lens.config import Settings, parse_storage_backend
from meal_lens.services.analysis import FoodAnalysisService
from meal_lens.services.connectivity import ConnectivityMonitor
from meal_lens.services.credentials import CredentialStore
from meal_lens.services.demo import DemoAnalyzer
from meal_lens.services.images import ImagePreprocessor
from meal_lens.services.inference import InferenceClient
from meal_lens.services.records import RecordStore
from meal_lens.services.storage import KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: KeyValueStore
    credential_store: CredentialStore
    connectivity: ConnectivityMonitor
    analysis_service: FoodAnalysisService
    record_store: RecordStore
    close_resources: Callable[[], Awaitable[None]]


def build_storage(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by settings."""
    backend = parse_storage_backend(settings.storage_backend)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage requires url and service key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client=client, table=settings.supabase_table)
    return JsonFileKeyValueStore.create(settings.storage_path)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = build_storage(resolved_settings)
    credential_store = CredentialStore(storage)
    connectivity = HttpxConnectivityMonitor.create(
        probe_url=resolved_settings.connectivity_probe_url,
        interval_seconds=resolved_settings.connectivity_probe_interval_seconds,
    )
    transport = OpenAIInferenceTransport.create(
        base_url=resolved_settings.openai_base_url,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    inference_client = InferenceClient(
        transport=transport,
        model=resolved_settings.openai_model,
        max_tokens=resolved_settings.openai_max_tokens,
        max_attempts=resolved_settings.max_attempts,
        retry_delay_seconds=resolved_settings.retry_delay_seconds,
        retry_decoding_errors=resolved_settings.retry_decoding_errors,
    )
    analysis_service = FoodAnalysisService(
        credential_store=credential_store,
        connectivity=connectivity,
        preprocessor=ImagePreprocessor(
            max_bytes=resolved_settings.max_image_bytes,
            max_dimension=resolved_settings.max_image_dimension,
        ),
        inference_client=inference_client,
        demo_analyzer=DemoAnalyzer(delay_seconds=resolved_settings.demo_delay_seconds),
    )
    record_store = RecordStore(storage)

    async def close_resources() -> None:
        await connectivity.stop()
        await transport.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        credential_store=credential_store,
        connectivity=connectivity,
        analysis_service=analysis_service,
        record_store=record_store,
        close_resources=close_resources,
    )
