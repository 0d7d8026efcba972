"""Identity provider integrations for the OAuth login flow."""

from app.identity.provider import IdentityProfile, IdentityProvider, GoogleIdentityProvider

__all__ = ["IdentityProfile", "IdentityProvider", "GoogleIdentityProvider"]
