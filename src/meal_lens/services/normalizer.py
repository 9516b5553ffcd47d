"""Maps decoded model answers to persisted records."""

from meal_lens.domain.analysis import AnalysisResult
from meal_lens.domain.records import FoodAnalysisRecord, Ingredient, NutritionInfo


def normalize_result(
    result: AnalysisResult, image_data: bytes | None = None
) -> FoodAnalysisRecord:
    """Build a new record from a raw analysis; totals are copied as-is."""
    ingredients = [
        Ingredient(
            name=item.name,
            quantity=item.quantity,
            unit=item.unit,
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fat=item.fat,
        )
        for item in result.ingredients
    ]
    totals = NutritionInfo(
        calories=result.totals.calories,
        protein=result.totals.protein,
        carbs=result.totals.carbs,
        fat=result.totals.fat,
    )
    return FoodAnalysisRecord(
        meal_name=result.meal_name,
        image_data=image_data,
        total_calories=result.total_calories,
        confidence=result.confidence,
        ingredients=ingredients,
        totals=totals,
    )
