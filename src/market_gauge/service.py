import logging
from typing import Any, Callable, Dict

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    analyze_points_endpoint,
    composite_endpoint,
    correlation_analyze_endpoint,
    correlation_endpoint,
    fear_greed_endpoint,
    power_law_endpoint,
)
from .api_schemas import (
    CompositeRequest,
    CompositeResponse,
    CorrelationAnalyzeRequest,
    CorrelationAnalyzeResponse,
    PowerLawAnalyzeRequest,
)
from .auth import api_key_dependency
from .errors import DataSourceError, MarketGaugeError
from .pipeline.correlation import CorrelationEngine
from .pipeline.fear_greed import FearGreedEngine
from .pipeline.power_law import PowerLawEngine

logger = logging.getLogger(__name__)


def _run(handler: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    try:
        return handler()
    except MarketGaugeError as exc:
        raise HTTPException(
            status_code=422,
            detail={"error": type(exc).__name__, "message": str(exc)},
        ) from exc
    except DataSourceError as exc:
        logger.error(f"Upstream failure from {exc.source}: {exc.detail}")
        raise HTTPException(
            status_code=502,
            detail={"error": "DataSourceError", "source": exc.source, "message": exc.detail},
        ) from exc


def create_app(
    power_law: PowerLawEngine | None = None,
    fear_greed: FearGreedEngine | None = None,
    correlation: CorrelationEngine | None = None,
    api_key: str | None = None,
    allowed_origins: list[str] | None = None,
) -> FastAPI:
    app = FastAPI(title="Market Gauge", version="0.1.0")
    power_law_engine = power_law or PowerLawEngine()
    fear_greed_engine = fear_greed or FearGreedEngine()
    correlation_engine = correlation or CorrelationEngine()
    app.state.api_key = api_key
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    secured = [Depends(api_key_dependency)]

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/power-law", dependencies=secured)
    def power_law_report() -> dict:
        return _run(lambda: power_law_endpoint(engine=power_law_engine))

    @app.post("/power-law/analyze", dependencies=secured)
    def power_law_analyze(payload: PowerLawAnalyzeRequest) -> dict:
        return _run(lambda: analyze_points_endpoint(payload.model_dump()))

    @app.get("/fear-greed", dependencies=secured)
    def fear_greed_report(asset_type: str = Query("stocks", alias="type")) -> dict:
        return _run(lambda: fear_greed_endpoint(asset_type, engine=fear_greed_engine))

    @app.post("/sentiment/composite", response_model=CompositeResponse, dependencies=secured)
    def sentiment_composite(payload: CompositeRequest) -> dict:
        return _run(lambda: composite_endpoint(payload.model_dump()))

    @app.get("/correlation", dependencies=secured)
    def correlation_report() -> dict:
        return _run(lambda: correlation_endpoint(engine=correlation_engine))

    @app.post("/correlation/analyze", response_model=CorrelationAnalyzeResponse, dependencies=secured)
    def correlation_analyze(payload: CorrelationAnalyzeRequest) -> dict:
        return _run(lambda: correlation_analyze_endpoint(payload.model_dump()))

    return app
