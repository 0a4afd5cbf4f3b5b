"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swapquote import __version__
from swapquote.config import Settings, get_settings
from swapquote.engine import DryRunQuoteEngine, SwapQuoteEngine
from swapquote.errors import register_exception_handlers
from swapquote.quote_report import QuoteReportLogger
from swapquote.rfqt import RegistryAccessCounter, RegistryGate
from swapquote.sources import SourceFilterResolver
from swapquote.web.params import RequestParamParser, SlippagePolicy
from swapquote.web.services import ErrorClassifier, QuoteOrchestrator

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[SwapQuoteEngine] = None,
    registry_counter: Optional[RegistryAccessCounter] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        engine: Quoting engine (defaults to the dry-run engine)
        registry_counter: Shared registry access counter
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Swap Quote API",
        description="Swap quote validation and routing for DEX aggregation",
        version=__version__,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    if engine is None:
        logger.warning("No quoting engine configured - using dry-run engine")
        engine = DryRunQuoteEngine(chain_id=settings.chain_id)

    # Whitelists are read once here and passed down by constructor
    source_resolver = SourceFilterResolver(
        rfqt_api_keys=settings.rfqt_api_keys,
        plp_api_keys=settings.plp_api_keys,
    )
    app.state.param_parser = RequestParamParser(
        chain_id=settings.chain_id,
        source_resolver=source_resolver,
        slippage_policy=SlippagePolicy(default=settings.default_slippage_percentage),
    )
    app.state.orchestrator = QuoteOrchestrator(
        engine=engine,
        chain_id=settings.chain_id,
        classifier=ErrorClassifier(),
        quote_report_logger=QuoteReportLogger(),
        market_depth_max_samples=settings.market_depth_max_samples,
        market_depth_default_distribution=settings.market_depth_default_distribution,
    )
    app.state.registry_gate = RegistryGate(
        passwords=settings.registry_passwords,
        api_key_whitelist=settings.rfqt_api_keys,
        counter=registry_counter or RegistryAccessCounter(),
    )
    app.state.settings = settings
    app.state.swap_docs_url = settings.swap_docs_url

    # Register routes
    from swapquote.api.routes import health
    from swapquote.web.controllers import swap_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(swap_router)

    return app


# Default app instance
app = create_app()
