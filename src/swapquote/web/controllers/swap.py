"""Swap API endpoints.

Handlers only move data between HTTP and the swap components; errors they
raise are rendered by the registered API error handlers.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from swapquote.rfqt import RegistryGate
from swapquote.web.contracts.swap import (
    MarketDepthResponse,
    RootResponse,
    SwapPriceResponse,
    SwapQuoteResponse,
    TokenListResponse,
    TokenPriceResponse,
)
from swapquote.web.deps import (
    get_docs_url,
    get_orchestrator,
    get_param_parser,
    get_registry_gate,
)
from swapquote.web.params import RequestParamParser
from swapquote.web.services.orchestrator import QuoteOrchestrator

router = APIRouter(prefix="/swap/v1", tags=["swap"])


@router.get("", response_model=RootResponse)
async def root(docs_url: str = Depends(get_docs_url)) -> RootResponse:
    """Root of the Swap API."""
    return RootResponse(
        message=f"This is the root of the Swap API. Visit {docs_url} for details about this API."
    )


@router.get("/rfq/registry")
async def get_rfq_registry(request: Request, gate: RegistryGate = Depends(get_registry_gate)):
    """List RFQ-T whitelisted API keys.

    Requires ``Authorization: Bearer <token>``; any failure is a bare 401.
    """
    result = gate.authorize(request.headers.get("Authorization"))
    if not result.authorized:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)
    return result.payload


@router.get("/quote", response_model=SwapQuoteResponse, response_model_exclude_none=True)
async def get_swap_quote(
    request: Request,
    parser: RequestParamParser = Depends(get_param_parser),
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
) -> SwapQuoteResponse:
    """Get a firm swap quote."""
    params = parser.parse(request.query_params, request.headers, "quote")
    return await orchestrator.get_swap_quote(params)


@router.get("/price", response_model=SwapPriceResponse, response_model_exclude_none=True)
async def get_swap_price(
    request: Request,
    parser: RequestParamParser = Depends(get_param_parser),
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
) -> SwapPriceResponse:
    """Get an indicative swap price."""
    params = parser.parse(request.query_params, request.headers, "price")
    return await orchestrator.get_swap_price(params)


@router.get("/tokens", response_model=TokenListResponse)
async def get_swap_tokens(orchestrator: QuoteOrchestrator = Depends(get_orchestrator)) -> TokenListResponse:
    """Tokens tradable on this chain."""
    return orchestrator.list_tokens()


@router.get("/prices", response_model=TokenPriceResponse)
async def get_token_prices(
    request: Request,
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
) -> TokenPriceResponse:
    """Prices of every token against one unit of ``sellToken`` (default WETH)."""
    return await orchestrator.get_token_prices(request.query_params.get("sellToken"))


@router.get("/depth", response_model=MarketDepthResponse)
async def get_market_depth(
    request: Request,
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
) -> MarketDepthResponse:
    """Sampled market depth for a token pair."""
    return await orchestrator.get_market_depth(request.query_params)
