"""
SFMC Token Manager

Obtains and caches the OAuth2 bearer token used for every SFMC REST call.

Two modes are supported:
- Manual token: a pre-provisioned token from SFMC_MANUAL_TOKEN is used as-is
  and treated as valid for a fixed window (24h by default).
- Client credentials: the token is exchanged at {auth_url}/v2/token and
  refreshed once it comes within the safety margin (5 min) of its expiry.

Authentication failure is an expected outcome (it triggers demo data), so
ensure_authenticated() never raises. The reason is kept on `last_error` and
logged with the upstream status code and body for the operator.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from ...config import config

logger = logging.getLogger(__name__)

@dataclass
class AccessToken:
    """A bearer token and the epoch second at which it stops being accepted"""
    value: str
    expires_at: float

    def is_valid(self, margin: float, now: float) -> bool:
        return now + margin < self.expires_at

class TokenCache:
    """Holds the current token; one instance per TokenManager"""

    def __init__(self):
        self.lock = threading.Lock()
        self.token: Optional[AccessToken] = None
        self.rest_instance_url: Optional[str] = None

    def get(self) -> Optional[AccessToken]:
        with self.lock:
            return self.token

    def store(self, token: AccessToken, rest_instance_url: Optional[str] = None):
        with self.lock:
            self.token = token
            if rest_instance_url:
                self.rest_instance_url = rest_instance_url.rstrip('/')

    def clear(self):
        with self.lock:
            self.token = None

class TokenManager:
    """Ensures a valid SFMC access token is available"""

    def __init__(self, settings=None, session: Optional[requests.Session] = None,
                 cache: Optional[TokenCache] = None, clock: Callable[[], float] = time.time):
        self.settings = settings or config
        self.session = session or requests.Session()
        self.cache = cache or TokenCache()
        self.clock = clock
        self.last_error: Optional[str] = None
        self.auth_calls = 0

    @property
    def safety_margin(self) -> int:
        return self.settings.SFMC_TOKEN_SAFETY_MARGIN

    @property
    def token_url(self) -> str:
        return f"{self.settings.SFMC_AUTH_URL.rstrip('/')}/v2/token"

    @property
    def base_url(self) -> str:
        """REST base URL, preferring the instance URL returned with the token"""
        return self.cache.rest_instance_url or self.settings.SFMC_BASE_URL.rstrip('/')

    @property
    def access_token(self) -> Optional[str]:
        token = self.cache.get()
        return token.value if token else None

    @property
    def is_authenticated(self) -> bool:
        """True if a token is cached and not yet past its expiry"""
        token = self.cache.get()
        return token is not None and token.expires_at > self.clock()

    def ensure_authenticated(self) -> bool:
        """
        Make sure a usable token is cached

        Returns:
            bool: True if a valid token is available, False if authentication failed
        """
        manual_token = self.settings.SFMC_MANUAL_TOKEN
        if manual_token:
            logger.info("🔑 Using manual token from environment")
            now = self.clock()
            token = self.cache.get()
            if token is None or token.value != manual_token or token.expires_at <= now:
                self.cache.store(AccessToken(
                    value=manual_token,
                    expires_at=now + self.settings.SFMC_MANUAL_TOKEN_TTL
                ))
            return True

        token = self.cache.get()
        if token and token.is_valid(self.safety_margin, self.clock()):
            return True

        return self.authenticate()

    def authenticate(self) -> bool:
        """Exchange client credentials for a new token"""
        self.auth_calls += 1
        payload: Dict[str, Any] = {
            'grant_type': 'client_credentials',
            'client_id': self.settings.SFMC_CLIENT_ID,
            'client_secret': self.settings.SFMC_CLIENT_SECRET
        }
        if self.settings.SFMC_SCOPE:
            payload['scope'] = self.settings.SFMC_SCOPE
        if self.settings.SFMC_ACCOUNT_ID:
            payload['account_id'] = self.settings.SFMC_ACCOUNT_ID

        logger.info(f"🔄 Requesting SFMC token from {self.token_url}")

        try:
            response = self.session.post(
                self.token_url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.settings.SFMC_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            data = response.json()

            access_token = data.get('access_token') if isinstance(data, dict) else None
            if not access_token:
                return self._fail(f"Token response did not contain an access_token: {json.dumps(data)[:500]}")

            expires_in = int(data.get('expires_in') or 3600)

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 'unknown'
            body = e.response.text if e.response is not None else ''
            logger.error(f"❌ SFMC authentication failed with status {status}")
            logger.error(f"   Response body: {body[:1000]}")
            return self._fail(f"Authentication failed with status {status}: {body[:200]}")

        except (TypeError, ValueError) as e:
            return self._fail(f"Malformed token response: {str(e)}")

        except requests.exceptions.RequestException as e:
            return self._fail(f"Authentication request error: {str(e)}")

        # Expiry is the raw upstream expiry; the safety margin is applied when checking validity
        self.cache.store(
            AccessToken(value=access_token, expires_at=self.clock() + expires_in),
            rest_instance_url=data.get('rest_instance_url') if isinstance(data.get('rest_instance_url'), str) else None
        )
        self.last_error = None

        logger.info("✅ SFMC Authentication successful!")
        logger.info(f"🔑 Token expires in: {expires_in} seconds")
        if data.get('rest_instance_url'):
            logger.info(f"🌐 REST instance URL: {data['rest_instance_url']}")
        if data.get('scope'):
            logger.info(f"📧 Available scopes: {data['scope']}")
        return True

    def invalidate(self):
        """Drop the cached token so the next call re-authenticates"""
        logger.info("🔄 Invalidating cached SFMC token")
        self.cache.clear()

    def _fail(self, reason: str) -> bool:
        self.last_error = reason
        logger.error(f"❌ {reason}")
        return False
