"""Food image analysis pipeline."""

import asyncio
import logging
from dataclasses import dataclass

from PIL import Image

from meal_lens.domain.errors import NoConnectionError
from meal_lens.domain.records import FoodAnalysisRecord
from meal_lens.services.connectivity import ConnectivityMonitor
from meal_lens.services.credentials import CredentialStore
from meal_lens.services.demo import DemoAnalyzer
from meal_lens.services.images import ImagePreprocessor
from meal_lens.services.inference import InferenceClient
from meal_lens.services.normalizer import normalize_result

_logger = logging.getLogger(__name__)


@dataclass
class FoodAnalysisService:
    """Turns a meal photo into a food analysis record.

    Steps run strictly in order: connectivity preflight, credential check
    (falling back to the demo analyzer when the credential is missing or
    malformed), image preprocessing, inference with retry, normalization.
    Failures surface as ``AnalysisError`` subclasses.
    """

    credential_store: CredentialStore
    connectivity: ConnectivityMonitor
    preprocessor: ImagePreprocessor
    inference_client: InferenceClient
    demo_analyzer: DemoAnalyzer

    async def analyze(self, image: Image.Image | bytes) -> FoodAnalysisRecord:
        """Run the full pipeline for one image."""
        if not self.connectivity.is_available:
            _logger.warning("Analysis aborted: no network connection")
            raise NoConnectionError()

        if not self.credential_store.is_valid():
            _logger.info("No valid credential configured, using demo analysis")
            return await self.demo_analyzer.analyze(image)

        prepared = await asyncio.to_thread(self.preprocessor.prepare, image)
        _logger.info("Prepared image payload: %s bytes", prepared.size)

        api_key = self.credential_store.get()
        _logger.info(
            "Requesting analysis with credential %s", self.credential_store.masked()
        )
        result = await self.inference_client.analyze(prepared, api_key)
        _logger.info(
            "Analysis complete: %s (%s kcal)", result.meal_name, result.total_calories
        )
        return normalize_result(result, image_data=prepared.data)

    async def analyze_demo(
        self, image: Image.Image | bytes | None = None
    ) -> FoodAnalysisRecord:
        """Return the demo analysis regardless of configuration."""
        return await self.demo_analyzer.analyze(image)
