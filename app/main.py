from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.assistant.router import router as assistant_router
from app.core.llm.deps import build_siliconflow_config
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.body_limit import BodySizeLimitMiddleware
from app.core.middleware.cors import CorsHeadersMiddleware
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.settings import get_settings

setup_logging()


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Snapshot LLM configuration once; handlers receive it through a dependency.
        app.state.siliconflow_config = build_siliconflow_config(settings)
        yield

    app = FastAPI(
        title="AUTO-GEN API",
        description=(
            "Relay between the vehicle-configuration UI and an OpenAI-compatible LLM API.\n\n"
            "Design principles:\n"
            "- Stateless: every request is reshaped, forwarded once, and reshaped back.\n"
            "- Structured replies are extracted best-effort from model text; recommendation "
            "keys are always restricted to the caller's whitelist.\n"
            "- Logging and metrics carry metadata only, never prompts or model output."
        ),
        lifespan=lifespan,
        docs_url="/swagger",
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime checks for load balancers and the UI.",
            },
            {
                "name": "assistant",
                "description": "Chat, parameter recommendation and parameter audit.",
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    # Last added runs first: CORS wraps everything, including 413 and error responses.
    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)
    app.add_middleware(HttpLoggingMiddleware)
    app.add_middleware(CorsHeadersMiddleware)

    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return "AUTO-GEN API running"

    @app.get(
        "/api/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "Does not call the upstream LLM API and does not require an API key."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(ok=True)

    app.include_router(metrics_router)
    app.include_router(assistant_router)
    return app


app = create_app()
