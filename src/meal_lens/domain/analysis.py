"""Wire models for the chat completions request and the raw analysis."""

from typing import Literal

from pydantic import BaseModel, Field


class TextPart(BaseModel):
    """Instruction text content part."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    url: str


class ImagePart(BaseModel):
    """Inline image content part."""

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class ChatMessage(BaseModel):
    role: Literal["user"] = "user"
    content: tuple[TextPart, ImagePart]


class ResponseFormat(BaseModel):
    type: str = "json_object"


class AnalysisRequest(BaseModel):
    """Request body for a single image analysis call."""

    model: str
    messages: list[ChatMessage] = Field(min_length=1, max_length=1)
    max_tokens: int
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready request body."""
        return self.model_dump(mode="json", exclude_none=True)


class ResponseMessage(BaseModel):
    content: str | None = None


class Choice(BaseModel):
    message: ResponseMessage


class ChatCompletionEnvelope(BaseModel):
    """Outer response body; only the fields the pipeline reads."""

    choices: list[Choice]


class IngredientData(BaseModel):
    """Single ingredient as returned by the model."""

    name: str
    quantity: float
    unit: str
    calories: int
    protein: float
    carbs: float
    fat: float


class NutritionData(BaseModel):
    calories: int
    protein: float
    carbs: float
    fat: float


class AnalysisResult(BaseModel):
    """Decoded model answer before normalization."""

    meal_name: str
    total_calories: int
    confidence: float
    ingredients: list[IngredientData]
    totals: NutritionData
