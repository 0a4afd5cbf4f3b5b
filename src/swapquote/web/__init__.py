"""Web boundary layer for the swap API.

Raw HTTP input is turned into canonical requests here and passed to the
quoting engine; engine failures are classified into API errors on the way
back out.
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
