"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from meal_lens.api.models import CredentialUpdate, IngredientPayload, record_payload
from meal_lens.app_logging import configure_logging
from meal_lens.containers import AppContainer
from meal_lens.domain.errors import AnalysisError, AnalysisErrorKind
from meal_lens.domain.records import FoodAnalysisRecord, IngredientNotFoundError

ERROR_STATUS_CODES: dict[AnalysisErrorKind, int] = {
    AnalysisErrorKind.NO_CONNECTION: status.HTTP_503_SERVICE_UNAVAILABLE,
    AnalysisErrorKind.IMAGE_TOO_LARGE: status.HTTP_413_CONTENT_TOO_LARGE,
    AnalysisErrorKind.INVALID_IMAGE: status.HTTP_400_BAD_REQUEST,
    AnalysisErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AnalysisErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    AnalysisErrorKind.DECODING_ERROR: status.HTTP_502_BAD_GATEWAY,
    AnalysisErrorKind.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.connectivity.start()
        except Exception:
            logger.exception("Failed to start connectivity monitor")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(
        request: Request, exc: AnalysisError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(exc.kind, status.HTTP_502_BAD_GATEWAY),
            content={"error": exc.kind.value, "detail": exc.user_message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyses")
    async def analyze(request: Request, save: bool = True) -> dict[str, object]:
        """Analyze a raw image body and optionally save the record."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(status_code=400, detail="Image body is required")
        record = await state_container.analysis_service.analyze(image_bytes)
        if save:
            state_container.record_store.save(record)
        return record_payload(record)

    @app.post("/analyses/demo")
    async def analyze_demo(request: Request, save: bool = True) -> dict[str, object]:
        """Run the demo analysis."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        record = await state_container.analysis_service.analyze_demo(
            image_bytes or None
        )
        if save:
            state_container.record_store.save(record)
        return record_payload(record)

    @app.get("/analyses")
    async def list_analyses(
        request: Request, day: date | None = None
    ) -> dict[str, object]:
        """List saved analyses, optionally for one day."""
        state_container: AppContainer = request.app.state.container
        if day is None:
            records = state_container.record_store.list_all()
        else:
            records = state_container.record_store.for_day(
                day, _timezone(state_container)
            )
        return {"analyses": [record_payload(record) for record in records]}

    @app.delete("/analyses")
    async def clear_analyses(request: Request) -> dict[str, str]:
        """Delete every saved analysis."""
        state_container: AppContainer = request.app.state.container
        state_container.record_store.clear()
        return {"status": "ok"}

    @app.get("/analyses/{record_id}")
    async def get_analysis(record_id: UUID, request: Request) -> dict[str, object]:
        """Return a saved analysis."""
        state_container: AppContainer = request.app.state.container
        return record_payload(_require_record(state_container, record_id))

    @app.get("/analyses/{record_id}/image")
    async def get_analysis_image(record_id: UUID, request: Request) -> Response:
        """Return the embedded JPEG of a saved analysis."""
        state_container: AppContainer = request.app.state.container
        record = _require_record(state_container, record_id)
        if record.image_data is None:
            raise HTTPException(status_code=404, detail="No image stored")
        return Response(content=record.image_data, media_type="image/jpeg")

    @app.delete("/analyses/{record_id}")
    async def delete_analysis(record_id: UUID, request: Request) -> dict[str, str]:
        """Delete a saved analysis."""
        state_container: AppContainer = request.app.state.container
        if not state_container.record_store.delete(record_id):
            raise HTTPException(status_code=404, detail="Analysis not found")
        return {"status": "ok"}

    @app.post("/analyses/{record_id}/ingredients")
    async def add_ingredient(
        record_id: UUID, payload: IngredientPayload, request: Request
    ) -> dict[str, object]:
        """Add an ingredient and recompute totals."""
        state_container: AppContainer = request.app.state.container
        record = _require_record(state_container, record_id)
        record.add_ingredient(payload.to_ingredient())
        state_container.record_store.update(record)
        return record_payload(record)

    @app.put("/analyses/{record_id}/ingredients/{ingredient_id}")
    async def update_ingredient(
        record_id: UUID,
        ingredient_id: UUID,
        payload: IngredientPayload,
        request: Request,
    ) -> dict[str, object]:
        """Edit an ingredient and recompute totals."""
        state_container: AppContainer = request.app.state.container
        record = _require_record(state_container, record_id)
        try:
            record.update_ingredient(payload.to_ingredient(id=ingredient_id))
        except IngredientNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        state_container.record_store.update(record)
        return record_payload(record)

    @app.delete("/analyses/{record_id}/ingredients/{ingredient_id}")
    async def remove_ingredient(
        record_id: UUID, ingredient_id: UUID, request: Request
    ) -> dict[str, object]:
        """Remove an ingredient and recompute totals."""
        state_container: AppContainer = request.app.state.container
        record = _require_record(state_container, record_id)
        try:
            record.remove_ingredient(ingredient_id)
        except IngredientNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        state_container.record_store.update(record)
        return record_payload(record)

    @app.get("/summary/weekly")
    async def weekly_summary(request: Request) -> dict[str, object]:
        """Return calories for each of the last seven days."""
        state_container: AppContainer = request.app.state.container
        tz = _timezone(state_container)
        today = datetime.now(tz=tz).date()
        days = state_container.record_store.weekly_calories(today, tz)
        return {
            "days": [
                {"date": day.isoformat(), "calories": calories}
                for day, calories in days
            ]
        }

    @app.get("/settings/credential")
    async def credential_status(request: Request) -> dict[str, object]:
        """Return whether a valid credential is configured."""
        state_container: AppContainer = request.app.state.container
        store = state_container.credential_store
        return {"valid": store.is_valid(), "masked": store.masked()}

    @app.put("/settings/credential")
    async def update_credential(
        payload: CredentialUpdate, request: Request
    ) -> dict[str, object]:
        """Store a new credential; an empty value clears it."""
        state_container: AppContainer = request.app.state.container
        store = state_container.credential_store
        store.set(payload.value.strip())
        return {"valid": store.is_valid(), "masked": store.masked()}

    @app.delete("/settings/credential")
    async def clear_credential(request: Request) -> dict[str, object]:
        """Remove the stored credential."""
        state_container: AppContainer = request.app.state.container
        state_container.credential_store.clear()
        return {"valid": False, "masked": state_container.credential_store.masked()}

    return app


def _timezone(container: AppContainer) -> ZoneInfo:
    return ZoneInfo(container.settings.timezone)


def _require_record(container: AppContainer, record_id: UUID) -> FoodAnalysisRecord:
    record = container.record_store.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return record
