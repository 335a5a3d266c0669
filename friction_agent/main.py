from __future__ import annotations

import logging
import math

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .analyzer import analyze
from .config import load_settings
from .errors import AnalysisError, RateLimited, UnexpectedError
from .models import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from .rate_limit import FixedWindowRateLimiter

_settings = load_settings()

logging.basicConfig(
    level=getattr(logging, _settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Friction Agent", version="0.1.0")

rate_limiter = FixedWindowRateLimiter(
    max_requests=_settings.rate_limit_max,
    window_seconds=_settings.rate_limit_window_s,
)

# Browsers call this directly from any origin; narrow it with FRICTION_CORS_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)


def _client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(request: Request, response: Response) -> None:
    decision = rate_limiter.check_and_consume(_client_id(request))
    limit = str(rate_limiter.max_requests)

    if not decision.allowed:
        reset_seconds = math.ceil(decision.reset_in)
        reset_minutes = max(1, math.ceil(decision.reset_in / 60))
        raise RateLimited(
            f"Rate limit exceeded. Please try again in {reset_minutes} minute{'s' if reset_minutes != 1 else ''}.",
            headers={
                "X-RateLimit-Limit": limit,
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(reset_seconds),
                "Retry-After": str(reset_seconds),
            },
        )

    response.headers["X-RateLimit-Limit"] = limit
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)


@app.exception_handler(AnalysisError)
async def _analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error="Invalid request body").model_dump())


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.options("/analyze")
def analyze_preflight():
    return Response(status_code=200)


@app.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(enforce_rate_limit)],
)
def analyze_endpoint(req: AnalyzeRequest):
    try:
        return analyze(req, load_settings())
    except AnalysisError:
        raise
    except Exception as e:
        logger.exception("Analysis error")
        raise UnexpectedError(f"Analysis failed: {e}")
