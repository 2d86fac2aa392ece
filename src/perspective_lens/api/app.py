"""FastAPI application exposing the perspectives endpoints."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from perspective_lens.api.schemas import (
    ArticleOut,
    ClaimsRequest,
    ClaimVerificationOut,
    ErrorResponse,
    FactCheckResponse,
    LeanSearchResponse,
    PerspectiveOut,
    PerspectivesData,
    SearchPerspectivesResponse,
    TopicOut,
    TopicRequest,
    TrendingResponse,
)
from perspective_lens.assembler import NO_RESULTS_MESSAGE
from perspective_lens.config.factory import Services
from perspective_lens.data import LEANS, Lean
from perspective_lens.factcheck import unverified
from perspective_lens.metadata import MetadataParseError
from perspective_lens.trending import FALLBACK_TOPICS

CORS_ALLOW_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
]
CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]

TOPIC_REQUIRED = "Topic is required"
CLAIMS_REQUIRED = "Claims array is required"
INVALID_REQUEST = "Invalid request"
AI_NOT_CONFIGURED = "AI service not configured"
PARSE_FAILED = "Failed to parse response"

logger = logging.getLogger(__name__)


def _respond(body: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        body.model_dump(mode="json", by_alias=True, exclude_none=True),
        status_code=status_code,
    )


def _error(message: str, status_code: int) -> JSONResponse:
    return _respond(ErrorResponse(error=message), status_code)


def _topic(body: TopicRequest | None) -> str | None:
    topic = (body.topic if body else None) or ""
    return topic.strip() or None


def create_app(services: Services) -> FastAPI:
    """Build the API around already-configured services.

    Args:
        services: Components from ``create_from_config``.
    """
    app = FastAPI(title="perspective-lens", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )
    app.state.services = services

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected {request.url.path}: {exc.errors()}")
        return _error(INVALID_REQUEST, 400)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/search-perspectives")
    async def search_perspectives(body: TopicRequest | None = None) -> JSONResponse:
        topic = _topic(body)
        if topic is None:
            return _error(TOPIC_REQUIRED, 400)

        pipeline = services.pipeline()
        if pipeline is None:
            logger.error("CLAUDE_API_KEY is not configured")
            return _error(AI_NOT_CONFIGURED, 500)

        logger.info(f"Searching perspectives for: {topic}")
        try:
            output = await pipeline.run(topic)
        except MetadataParseError as e:
            logger.error(f"Topic metadata parse failed: {e}")
            return _error(PARSE_FAILED, 500)
        except Exception as e:
            logger.exception(f"Error in search-perspectives: {e}")
            return _error(str(e) or "Unknown error", 500)

        if not output.has_articles:
            return _respond(SearchPerspectivesResponse(success=False, error=NO_RESULTS_MESSAGE))

        data = PerspectivesData(
            topic=TopicOut.from_metadata(output.topic),
            perspectives=[PerspectiveOut.from_view(v) for v in output.perspectives],
        )
        return _respond(SearchPerspectivesResponse(success=True, data=data))

    async def search_one_lean(lean: Lean, body: TopicRequest | None) -> JSONResponse:
        topic = _topic(body)
        if topic is None:
            return _error(TOPIC_REQUIRED, 400)
        if services.orchestrator is None:
            return _respond(LeanSearchResponse(success=True, articles=[], source="none"))

        try:
            articles, source, _ = await services.orchestrator.search_lean(topic, lean)
            if services.repairer is not None and articles:
                articles, _ = await services.repairer.repair(articles)
        except Exception as e:
            logger.exception(f"Error in search-{lean}: {e}")
            return _error(str(e) or "Unknown error", 500)

        return _respond(
            LeanSearchResponse(
                success=True,
                articles=[ArticleOut.from_article(a) for a in articles],
                source=source,
            )
        )

    def lean_endpoint(lean: Lean):
        async def endpoint(body: TopicRequest | None = None) -> JSONResponse:
            return await search_one_lean(lean, body)

        return endpoint

    for lean in LEANS:
        app.add_api_route(
            f"/search-{lean}",
            lean_endpoint(lean),
            methods=["POST"],
            name=f"search_{lean}",
        )

    @app.post("/fact-check")
    async def fact_check(body: ClaimsRequest | None = None) -> JSONResponse:
        claims = [c.strip() for c in (body.claims if body and body.claims else [])]
        if not claims or not all(claims):
            return _error(CLAIMS_REQUIRED, 400)

        if services.fact_checker is None:
            logger.info("GOOGLE_FACT_CHECK_API_KEY not configured, returning unverified")
            verifications = unverified(claims)
        else:
            try:
                verifications, _ = await services.fact_checker.verify_claims(claims)
            except Exception as e:
                logger.exception(f"Error in fact-check: {e}")
                return _error(str(e) or "Unknown error", 500)

        return _respond(
            FactCheckResponse(
                success=True,
                data=[ClaimVerificationOut.from_verification(v) for v in verifications],
            )
        )

    @app.api_route("/trending-topics", methods=["GET", "POST"])
    async def trending_topics() -> JSONResponse:
        if services.trending is None:
            topics = list(FALLBACK_TOPICS)
        else:
            topics = await services.trending.fetch()
        return _respond(TrendingResponse(success=True, topics=topics))

    return app
