"""FastAPI dependencies resolving swap components from app state."""

from fastapi import Request

from swapquote.config import Settings
from swapquote.rfqt import RegistryGate
from swapquote.web.params import RequestParamParser
from swapquote.web.services.orchestrator import QuoteOrchestrator


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise RuntimeError(f"{name} is not initialized in app.state.{name}")
    return component


def get_param_parser(request: Request) -> RequestParamParser:
    return _from_state(request, "param_parser")


def get_orchestrator(request: Request) -> QuoteOrchestrator:
    return _from_state(request, "orchestrator")


def get_registry_gate(request: Request) -> RegistryGate:
    return _from_state(request, "registry_gate")


def get_docs_url(request: Request) -> str:
    return _from_state(request, "swap_docs_url")


def get_app_settings(request: Request) -> Settings:
    return _from_state(request, "settings")
