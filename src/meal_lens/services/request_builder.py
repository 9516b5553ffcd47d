"""Builds chat completion requests for meal photo analysis."""

from meal_lens.domain.analysis import (
    AnalysisRequest,
    ChatMessage,
    ImagePart,
    ImageUrl,
    ResponseFormat,
    TextPart,
)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 1000

ANALYSIS_PROMPT = """\
Analyze this food image and provide a detailed nutritional breakdown.
Return ONLY a valid JSON object with the following structure:
{
    "meal_name": "descriptive name of the meal",
    "total_calories": total calories as integer,
    "confidence": confidence level between 0 and 1,
    "ingredients": [
        {
            "name": "ingredient name",
            "quantity": amount as number,
            "unit": "grams/cups/pieces/etc",
            "calories": calories as integer,
            "protein": protein in grams,
            "carbs": carbohydrates in grams,
            "fat": fat in grams
        }
    ],
    "totals": {
        "calories": total calories,
        "protein": total protein in grams,
        "carbs": total carbs in grams,
        "fat": total fat in grams
    }
}
Be as accurate as possible with portion sizes and nutritional values. \
Return only valid JSON, no additional text."""


def image_data_url(base64_image: str) -> str:
    """Wrap a base64 JPEG payload in a data URL."""
    return f"data:image/jpeg;base64,{base64_image}"


def build_analysis_request(
    base64_image: str,
    *,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> AnalysisRequest:
    """Assemble the request for one image; no network access."""
    message = ChatMessage(
        content=(
            TextPart(text=ANALYSIS_PROMPT),
            ImagePart(image_url=ImageUrl(url=image_data_url(base64_image))),
        )
    )
    return AnalysisRequest(
        model=model,
        messages=[message],
        max_tokens=max_tokens,
        response_format=ResponseFormat(type="json_object"),
    )
