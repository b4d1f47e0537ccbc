"""
SFMC Services Module

Contains the Salesforce Marketing Cloud integration:
- token_manager: OAuth2 client-credentials token cache
- endpoint_catalog: prioritized candidate endpoints per data category
- endpoint_prober: first-success-wins probing of the candidates
"""

from .token_manager import AccessToken, TokenCache, TokenManager
from .endpoint_catalog import EMAIL_SENDS, TRACKING_EVENTS, EndpointCandidate, EndpointCatalog
from .endpoint_prober import EndpointProber, ProbeFailure, ProbeResults

__all__ = [
    'AccessToken',
    'TokenCache',
    'TokenManager',
    'EMAIL_SENDS',
    'TRACKING_EVENTS',
    'EndpointCandidate',
    'EndpointCatalog',
    'EndpointProber',
    'ProbeFailure',
    'ProbeResults'
]
