from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from flex_reviews.api.router import api_router
from flex_reviews.core.config import get_settings
from flex_reviews.core.telemetry import configure_logging, request_span, setup_telemetry
from flex_reviews.services.approvals import get_approval_store
from flex_reviews.services.reviews import get_places_connector

settings = get_settings()
configure_logging(settings)
telemetry = setup_telemetry(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        yield
    finally:
        telemetry.shutdown()
        await get_approval_store().close()
        get_approval_store.cache_clear()
        get_places_connector().cache.clear()


app = FastAPI(title=settings.app_name, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("rejected request path=%s errors=%s", request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started_at = time.perf_counter()
    with request_span(request.method, request.url.path) as span:
        response = await call_next(request)
        span.set_attribute("http.response.status_code", response.status_code)
    elapsed_ms = (time.perf_counter() - started_at) * 1000.0
    logger.info(
        "http request method=%s path=%s status=%s duration_ms=%.2f",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


app.include_router(api_router)
