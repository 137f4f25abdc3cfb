"""Study Partner API: analyze endpoint, health check, and dependencies."""

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from study_partner.ai.factory import get_vision_model
from study_partner.ai.model_base import BaseVisionModel
from study_partner.ai.schema import AnalysisResult
from study_partner.core.analysis import AnalysisService, validate_request
from study_partner.core.config import get_config
from study_partner.core.errors import RequestValidationError

_log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_vision_model() -> BaseVisionModel:
    cfg = get_config()
    return get_vision_model(cfg.analyzer, cfg)


def _get_analysis_service(
    model: BaseVisionModel = Depends(_get_vision_model),
) -> AnalysisService:
    return AnalysisService(model, get_config())


app = FastAPI(title="Study Partner")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health(model: BaseVisionModel = Depends(_get_vision_model)) -> dict:
    return {
        "status": "ok",
        "model": model.get_model_card().name,
        "has_default_credential": get_config().gemini_api_key is not None,
    }


@app.post("/v1/analyze")
async def analyze(
    request: Request,
    service: AnalysisService = Depends(_get_analysis_service),
) -> JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        body = None
    try:
        analysis_request = validate_request(body)
    except RequestValidationError as e:
        _log.info("Rejected analyze request: %s", e)
        return JSONResponse(status_code=400, content=AnalysisResult.failure(str(e)).to_response())

    # The model call blocks on network I/O; keep it off the event loop.
    result = await run_in_threadpool(service.analyze, analysis_request)
    return JSONResponse(status_code=200 if result.success else 500, content=result.to_response())
