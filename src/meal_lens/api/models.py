"""Request bodies for the local API."""

from pydantic import BaseModel, Field

from meal_lens.domain.records import FoodAnalysisRecord, Ingredient


class CredentialUpdate(BaseModel):
    value: str


class IngredientPayload(BaseModel):
    """User-entered ingredient values."""

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    unit: str
    calories: int = Field(ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)

    def to_ingredient(self, **overrides: object) -> Ingredient:
        """Build a domain ingredient, optionally keeping an existing id."""
        return Ingredient(**self.model_dump(), **overrides)


def record_payload(record: FoodAnalysisRecord) -> dict[str, object]:
    """Serialize a record for responses without the embedded image."""
    payload = record.model_dump(mode="json", exclude={"image_data"})
    payload["has_image"] = record.image_data is not None
    return payload
