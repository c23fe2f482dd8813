"""
Portfolio Calculator Service

HTTP/JSON binding for the calculation engine. Every endpoint is a pure
function of its request body; the service keeps no portfolio state.
"""
import logging
import os
import uuid
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from calculator_config import AppConfig, get_config, load_config, use_default_config
from calculator_service.context import set_request_id, clear_request_id
from calculator_service.logger import configure_root_logger
from portfolio_calculator import (
    BlendedAnalyzer,
    BlendedRequest,
    BlendedResponse,
    CalculationError,
    PortfolioAnalyzer,
    PortfolioSnapshot,
    PortfolioSummary,
    RebalanceRequest,
    RebalanceResponse,
    RebalanceSolver,
    ScenarioEngine,
    ScenarioRequest,
    ScenarioResponse,
    TargetAnalyzer,
    TargetsRequest,
    TargetsResponse,
    WeightsRequest,
    WeightsResponse,
    errors_from_validation,
    evaluate_expression,
)

logger = logging.getLogger(__name__)

VERSION = os.getenv('SERVICE_VERSION', '1.0.0')
REQUEST_ID_HEADER = "X-Request-ID"


class ExpressionRequest(BaseModel):
    expression: str


class ExpressionResponse(BaseModel):
    value: float


def _load_app_config() -> AppConfig:
    config_path = os.getenv('CALCULATOR_CONFIG_PATH')
    if config_path:
        return load_config(config_path)
    return use_default_config()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application around a validated configuration"""
    config = config or _load_app_config()
    configure_root_logger(config.logging)

    scenario_engine = ScenarioEngine(config.calculation)
    target_analyzer = TargetAnalyzer(config.calculation)
    blended_analyzer = BlendedAnalyzer(config.calculation)
    rebalance_solver = RebalanceSolver(config.calculation)
    portfolio_analyzer = PortfolioAnalyzer(config.calculation)

    app = FastAPI(
        title="Portfolio Calculator Service",
        description="Scenario, target, blended and rebalance calculations for static portfolio snapshots",
        version=VERSION
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.service.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(CalculationError)
    async def calculation_error_handler(request: Request, exc: CalculationError):
        logger.warning(f"{request.url.path} rejected: {exc.code.value} {exc.message}")
        return JSONResponse(
            status_code=422,
            content={"detail": exc.message, "code": exc.code.value, "field": exc.field}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = errors_from_validation(exc.errors())
        logger.warning(f"{request.url.path} rejected: {', '.join(e.code.value for e in errors)}")
        return JSONResponse(
            status_code=422,
            content={
                "detail": "; ".join(e.message for e in errors),
                "errors": [e.to_dict() for e in errors],
            }
        )

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Portfolio Calculator Service",
            "version": VERSION,
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "version": VERSION}

    @app.post("/calc/scenario", response_model=ScenarioResponse)
    def calculate_scenario(request: ScenarioRequest):
        if "scenarios" not in request.model_fields_set:
            request = request.model_copy(update={"scenarios": list(config.scenarios.default_scenarios)})
        return scenario_engine.calculate(request)

    @app.post("/calc/targets", response_model=TargetsResponse)
    def calculate_targets(request: TargetsRequest):
        return target_analyzer.calculate(request)

    @app.post("/calc/blended", response_model=BlendedResponse)
    def calculate_blended(request: BlendedRequest):
        return blended_analyzer.calculate(request)

    @app.post("/calc/rebalance", response_model=RebalanceResponse)
    def calculate_rebalance(request: RebalanceRequest):
        return rebalance_solver.calculate(request)

    @app.post("/portfolio/summary", response_model=PortfolioSummary)
    def summarize_portfolio(request: PortfolioSnapshot):
        return portfolio_analyzer.calculate(request)

    @app.post("/rebalance/weights", response_model=WeightsResponse)
    def suggest_weights(request: WeightsRequest):
        return rebalance_solver.suggest_weights(request)

    @app.get("/scenarios/presets")
    async def scenario_presets():
        """Named scenario sets and the default set"""
        return {
            "default": config.scenarios.default_scenarios,
            "presets": config.scenarios.presets,
        }

    @app.post("/expressions/evaluate", response_model=ExpressionResponse)
    async def evaluate(request: ExpressionRequest):
        return ExpressionResponse(value=evaluate_expression(request.expression))

    logger.info(f"Portfolio Calculator Service {VERSION} ready")
    return app


# Module-level app for `uvicorn calculator_service.main:app`
app = create_app()


if __name__ == "__main__":
    import uvicorn
    service_config = get_config().service
    uvicorn.run(app, host=service_config.host, port=service_config.port)
