"""Persisted food analysis records."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class IngredientNotFoundError(LookupError):
    """Raised when an ingredient id is not part of a record."""


class NutritionInfo(BaseModel):
    """Aggregate nutrition totals for a record."""

    calories: int = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def formatted(self) -> dict[str, str]:
        """Return macros rounded to one decimal for display."""
        return {
            "protein": f"{self.protein:.1f}",
            "carbs": f"{self.carbs:.1f}",
            "fat": f"{self.fat:.1f}",
        }


class Ingredient(BaseModel):
    """Line item owned by a record."""

    id: UUID = Field(default_factory=uuid4)
    name: str
    quantity: float
    unit: str
    calories: int
    protein: float
    carbs: float
    fat: float


class FoodAnalysisRecord(BaseModel):
    """One completed analysis, including later user edits."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    meal_name: str
    image_data: bytes | None = None
    total_calories: int
    confidence: float
    ingredients: list[Ingredient] = Field(default_factory=list)
    totals: NutritionInfo = Field(default_factory=NutritionInfo)

    def recalculate_totals(self) -> None:
        """Rebuild totals and total calories from the ingredient list."""
        totals = NutritionInfo()
        for ingredient in self.ingredients:
            totals.calories += ingredient.calories
            totals.protein += ingredient.protein
            totals.carbs += ingredient.carbs
            totals.fat += ingredient.fat
        self.totals = totals
        self.total_calories = totals.calories

    def add_ingredient(self, ingredient: Ingredient) -> None:
        """Append an ingredient and recompute totals."""
        self.ingredients.append(ingredient)
        self.recalculate_totals()

    def update_ingredient(self, ingredient: Ingredient) -> None:
        """Replace the ingredient with the same id and recompute totals."""
        index = self._index_of(ingredient.id)
        self.ingredients[index] = ingredient
        self.recalculate_totals()

    def remove_ingredient(self, ingredient_id: UUID) -> Ingredient:
        """Remove an ingredient by id and recompute totals."""
        removed = self.ingredients.pop(self._index_of(ingredient_id))
        self.recalculate_totals()
        return removed

    def _index_of(self, ingredient_id: UUID) -> int:
        for index, ingredient in enumerate(self.ingredients):
            if ingredient.id == ingredient_id:
                return index
        raise IngredientNotFoundError(f"Ingredient {ingredient_id} not found")
