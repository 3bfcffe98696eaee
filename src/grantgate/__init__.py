"""grantgate - authorization and token trust service for an OIDC identity provider."""

__version__ = "0.1.0"
