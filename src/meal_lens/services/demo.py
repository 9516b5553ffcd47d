"""Offline fallback producing a fixed demonstration analysis."""

import asyncio
import logging
from dataclasses import dataclass

from PIL import Image

from meal_lens.domain.errors import ImageTooLargeError, InvalidImageError
from meal_lens.domain.records import FoodAnalysisRecord, Ingredient, NutritionInfo
from meal_lens.services.images import encode_jpeg, load_image, to_rgb

DEMO_MEAL_NAME = "Grilled Chicken Salad (Demo)"
DEMO_IMAGE_QUALITY = 0.8

_logger = logging.getLogger(__name__)


def demo_record(image_data: bytes | None = None) -> FoodAnalysisRecord:
    """Return the fixed demonstration record."""
    ingredients = [
        Ingredient(
            name="Grilled Chicken Breast",
            quantity=150,
            unit="grams",
            calories=247,
            protein=46.4,
            carbs=0,
            fat=5.4,
        ),
        Ingredient(
            name="Mixed Greens",
            quantity=100,
            unit="grams",
            calories=20,
            protein=2.2,
            carbs=3.7,
            fat=0.2,
        ),
        Ingredient(
            name="Cherry Tomatoes",
            quantity=50,
            unit="grams",
            calories=9,
            protein=0.4,
            carbs=1.9,
            fat=0.1,
        ),
        Ingredient(
            name="Olive Oil Dressing",
            quantity=15,
            unit="ml",
            calories=124,
            protein=0,
            carbs=0,
            fat=14,
        ),
    ]
    return FoodAnalysisRecord(
        meal_name=DEMO_MEAL_NAME,
        image_data=image_data,
        total_calories=400,
        confidence=0.92,
        ingredients=ingredients,
        totals=NutritionInfo(calories=400, protein=49.0, carbs=5.6, fat=19.7),
    )


@dataclass
class DemoAnalyzer:
    """Simulates an analysis without touching the network."""

    delay_seconds: float = 2.0

    async def analyze(
        self, image: Image.Image | bytes | None = None
    ) -> FoodAnalysisRecord:
        """Wait for the simulated delay and return the demo record."""
        _logger.info("Using demo analysis")
        await asyncio.sleep(self.delay_seconds)
        return demo_record(await asyncio.to_thread(_embed_image, image))


def _embed_image(image: Image.Image | bytes | None) -> bytes | None:
    if image is None:
        return None
    try:
        return encode_jpeg(to_rgb(load_image(image)), DEMO_IMAGE_QUALITY)
    except (InvalidImageError, ImageTooLargeError, OSError) as exc:
        _logger.warning("Demo analysis could not embed image: %s", exc)
        return None
