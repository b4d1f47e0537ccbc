"""
SFMC Endpoint Prober

Walks the candidate endpoints of a data category in priority order and
returns the first usable response body.

A candidate fails on network error, timeout, non-2xx status, malformed JSON
or an unusable (empty) body; the walk then moves on to the next candidate.
A 401 invalidates the cached token and the candidate is retried once with a
fresh one. Each category walk shares an overall deadline so a run of hanging
candidates cannot stack up num_candidates x timeout of latency.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from ...config import config
from ...utils.timezone_utils import now_in_timezone
from .endpoint_catalog import (
    EMAIL_SENDS, TRACKING_EVENTS, EndpointCatalog, EndpointCandidate, count_items
)
from .token_manager import TokenManager

logger = logging.getLogger(__name__)

class ProbeFailure(Exception):
    """A single candidate endpoint did not produce usable data"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

@dataclass
class ProbeResults:
    """Outcome of probing both data categories"""
    email_sends: Any = None
    tracking_events: Any = None

    @property
    def has_data(self) -> bool:
        return self.email_sends is not None or self.tracking_events is not None

class EndpointProber:
    """Finds the first SFMC endpoint that returns usable data for a category"""

    def __init__(self, token_manager: TokenManager, catalog: Optional[EndpointCatalog] = None,
                 settings=None, session: Optional[requests.Session] = None,
                 monotonic: Callable[[], float] = time.monotonic):
        self.token_manager = token_manager
        self.catalog = catalog or EndpointCatalog()
        self.settings = settings or config
        self.session = session or token_manager.session
        self.monotonic = monotonic

    def fetch_category(self, category: str, period: int) -> Optional[Any]:
        """
        Probe the candidates of one category, first success wins

        Args:
            category (str): EMAIL_SENDS or TRACKING_EVENTS
            period (int): Number of days the date-filtered candidates should cover

        Returns:
            The transformed body of the first usable candidate, or None if all failed
        """
        candidates = self.catalog.get_candidates(category)
        deadline = self.monotonic() + self.settings.SFMC_PROBE_BUDGET
        now = now_in_timezone('UTC')

        for index, candidate in enumerate(candidates, start=1):
            remaining = deadline - self.monotonic()
            if remaining <= 0:
                logger.warning(f"⏱️ Probe budget exhausted for {category} after {index - 1} candidates")
                break

            logger.info(f"📡 Trying {category} endpoint {index}/{len(candidates)}: {candidate.path}")
            try:
                body = self._probe(candidate, period, now, timeout=min(self.settings.SFMC_REQUEST_TIMEOUT, remaining))
            except ProbeFailure as e:
                logger.info(f"❌ Endpoint {index} failed: {e}")
                continue

            logger.info(f"✅ Endpoint {index} succeeded with {count_items(body)} items ({candidate.description})")
            return candidate.transform(body)

        logger.info(f"❌ All {category} endpoints failed")
        return None

    def fetch_all(self, period: int) -> ProbeResults:
        """Probe email sends and tracking events concurrently"""
        with ThreadPoolExecutor(max_workers=2) as executor:
            sends_future = executor.submit(self.fetch_category, EMAIL_SENDS, period)
            tracking_future = executor.submit(self.fetch_category, TRACKING_EVENTS, period)
            return ProbeResults(
                email_sends=sends_future.result(),
                tracking_events=tracking_future.result()
            )

    def explore(self, category: Optional[str] = None, period: int = 30) -> List[Dict[str, Any]]:
        """
        Probe every candidate without stopping at the first hit

        Used by the endpoint explorer to show which parts of the SFMC API
        this tenant actually exposes.
        """
        categories = [category] if category else self.catalog.get_categories()
        now = now_in_timezone('UTC')
        report = []

        for name in categories:
            for candidate in self.catalog.get_candidates(name):
                entry = {
                    'category': name,
                    'path': candidate.path,
                    'description': candidate.description,
                    'ok': False,
                    'status': None,
                    'item_count': 0,
                    'keys': [],
                    'error': None
                }
                try:
                    body = self._probe(candidate, period, now, timeout=self.settings.SFMC_REQUEST_TIMEOUT)
                    entry.update({
                        'ok': True,
                        'status': 200,
                        'item_count': count_items(body),
                        'keys': sorted(body.keys()) if isinstance(body, dict) else []
                    })
                except ProbeFailure as e:
                    entry.update({'status': e.status_code, 'error': str(e)})
                report.append(entry)

        return report

    def _probe(self, candidate: EndpointCandidate, period: int, now, timeout: float) -> Any:
        """Run one candidate, retrying once after re-authentication on 401"""
        try:
            return self._request(candidate, period, now, timeout)
        except ProbeFailure as e:
            if e.status_code != 401:
                raise

        logger.info("🔄 401 from SFMC - re-authenticating and retrying once")
        self.token_manager.invalidate()
        if not self.token_manager.ensure_authenticated():
            raise ProbeFailure(f"Re-authentication failed: {self.token_manager.last_error}", status_code=401)
        return self._request(candidate, period, now, timeout)

    def _request(self, candidate: EndpointCandidate, period: int, now, timeout: float) -> Any:
        url = f"{self.token_manager.base_url}{candidate.path}"
        params = candidate.build_params(period, self.settings.SFMC_PAGE_SIZE, now)
        headers = {
            'Authorization': f"Bearer {self.token_manager.access_token}",
            'Content-Type': 'application/json'
        }

        try:
            response = self.session.get(url, headers=headers, params=params, timeout=timeout)
            response.raise_for_status()
            body = response.json()

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            text = e.response.text[:200] if e.response is not None else ''
            raise ProbeFailure(f"HTTP {status}: {text}", status_code=status)

        except ValueError as e:
            raise ProbeFailure(f"Malformed JSON: {str(e)}")

        except requests.exceptions.RequestException as e:
            raise ProbeFailure(f"Request error: {str(e)}")

        if not candidate.matcher(body):
            raise ProbeFailure("No data in response", status_code=response.status_code)

        return body
