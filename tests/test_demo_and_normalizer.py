"""Tests for the demo fallback and result normalization."""

import asyncio

from meal_lens.domain.analysis import AnalysisResult
from meal_lens.services.demo import DEMO_MEAL_NAME, DemoAnalyzer, demo_record
from meal_lens.services.normalizer import normalize_result
from tests.conftest import ANALYSIS_PAYLOAD, jpeg_bytes


def test_demo_record_contents() -> None:
    record = demo_record()

    assert record.meal_name == DEMO_MEAL_NAME
    assert record.total_calories == 400
    assert record.confidence == 0.92
    assert [i.name for i in record.ingredients] == [
        "Grilled Chicken Breast",
        "Mixed Greens",
        "Cherry Tomatoes",
        "Olive Oil Dressing",
    ]
    assert record.totals.calories == 400
    assert record.totals.fat == 19.7


def test_demo_records_get_distinct_ids() -> None:
    first = demo_record()
    second = demo_record()

    assert first.id != second.id
    assert first.ingredients[0].id != second.ingredients[0].id


def test_demo_analyzer_waits_and_embeds_image(monkeypatch) -> None:  # type: ignore[no-untyped-def]
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("meal_lens.services.demo.asyncio.sleep", fake_sleep)

    record = asyncio.run(DemoAnalyzer(delay_seconds=2.0).analyze(jpeg_bytes()))

    assert delays == [2.0]
    assert record.image_data is not None
    assert record.image_data.startswith(b"\xff\xd8\xff")


def test_demo_analyzer_tolerates_unreadable_image() -> None:
    record = asyncio.run(DemoAnalyzer(delay_seconds=0).analyze(b"garbage"))

    assert record.meal_name == DEMO_MEAL_NAME
    assert record.image_data is None


def test_normalize_copies_fields_and_totals() -> None:
    result = AnalysisResult.model_validate(ANALYSIS_PAYLOAD)

    record = normalize_result(result, image_data=b"\xff\xd8\xffdata")

    assert record.meal_name == "Oatmeal with Berries"
    assert record.confidence == 0.81
    assert record.total_calories == 350
    assert record.totals.model_dump() == ANALYSIS_PAYLOAD["totals"]
    assert record.image_data == b"\xff\xd8\xffdata"
    assert [i.calories for i in record.ingredients] == [230, 42, 78]
    assert len({i.id for i in record.ingredients}) == 3
    assert record.created_at.tzinfo is not None


def test_normalize_does_not_recompute_totals() -> None:
    payload = {**ANALYSIS_PAYLOAD, "total_calories": 999}
    payload["totals"] = {"calories": 999, "protein": 1.0, "carbs": 2.0, "fat": 3.0}
    result = AnalysisResult.model_validate(payload)

    record = normalize_result(result)

    assert record.total_calories == 999
    assert record.totals.protein == 1.0
