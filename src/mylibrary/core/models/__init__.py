"""Identity and token models."""

from .identity import Identity, TokenClaims

__all__ = ["Identity", "TokenClaims"]
