"""HTTP controllers for the swap API."""

from swapquote.web.controllers.swap import router as swap_router

__all__ = [
    "swap_router",
]
