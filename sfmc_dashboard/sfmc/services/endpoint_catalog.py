# SFMC Endpoint Catalog
#
# The exact REST surface enabled on a given SFMC tenant is not known ahead
# of time, so each data category carries an ordered list of candidate
# endpoints. Order is priority: the prober stops at the first usable one.
# Lists are configuration data; bump CATALOG_VERSION when they change.

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...utils.timezone_utils import to_api_timestamp

EMAIL_SENDS = 'email_sends'
TRACKING_EVENTS = 'tracking_events'

def has_usable_body(body: Any) -> bool:
    """Non-empty `items` collection, non-empty list, or non-empty object without `items`"""
    if isinstance(body, dict):
        if 'items' in body:
            return isinstance(body['items'], list) and len(body['items']) > 0
        return len(body) > 0
    if isinstance(body, list):
        return len(body) > 0
    return False

def passthrough(body: Any) -> Any:
    return body

def count_items(body: Any) -> int:
    """Number of records in a response body, for logging and diagnostics"""
    if isinstance(body, dict):
        items = body.get('items')
        return len(items) if isinstance(items, list) else 0
    if isinstance(body, list):
        return len(body)
    return 0

@dataclass(frozen=True)
class EndpointCandidate:
    """One guessed SFMC endpoint: path, static params and how to judge its response"""
    path: str
    description: str
    params: Tuple[Tuple[str, str], ...] = ()
    date_filter: Optional[str] = None  # field name used in the $filter, e.g. createdDate
    matcher: Callable[[Any], bool] = field(default=has_usable_body, compare=False)
    transform: Callable[[Any], Any] = field(default=passthrough, compare=False)

    def build_params(self, period: int, page_size: int, now: datetime) -> Dict[str, Any]:
        """Query parameters for a probe covering the last `period` days"""
        params: Dict[str, Any] = {'$top': page_size}
        params.update(dict(self.params))
        if self.date_filter:
            start = now - timedelta(days=period)
            params['$filter'] = f"{self.date_filter} ge '{to_api_timestamp(start)}'"
            params.setdefault('$orderby', f"{self.date_filter} desc")
        return params

class EndpointCatalog:
    """Registry of candidate endpoints per data category"""

    CATALOG_VERSION = '2024.06'

    EMAIL_SEND_CANDIDATES = [
        EndpointCandidate(
            path='/messaging/v1/email/messages',
            description='Transactional Messaging API - email messages',
            date_filter='createdDate'
        ),
        EndpointCandidate(
            path='/asset/v1/content/assets',
            description='Content Builder API - assets'
        ),
        EndpointCandidate(
            path='/email/v1/sends',
            description='Legacy Email API - sends'
        ),
        EndpointCandidate(
            path='/platform/v1/send-definitions',
            description='Platform API - send definitions'
        ),
        EndpointCandidate(
            path='/data/v1/customobjectdata/key/_Sent/rowset',
            description='Data Extensions API - _Sent system table'
        ),
    ]

    TRACKING_EVENT_CANDIDATES = [
        EndpointCandidate(
            path='/data/v1/customobjectdata/key/_Open/rowset',
            description='Data Extensions API - _Open system table'
        ),
        EndpointCandidate(
            path='/data/v1/customobjectdata/key/_Click/rowset',
            description='Data Extensions API - _Click system table'
        ),
        EndpointCandidate(
            path='/data/v1/customobjectdata/key/_Bounce/rowset',
            description='Data Extensions API - _Bounce system table'
        ),
        EndpointCandidate(
            path='/platform/v1/tracking/opened',
            description='Platform API - open tracking',
            date_filter='EventDate'
        ),
        EndpointCandidate(
            path='/platform/v1/events',
            description='Platform Events API'
        ),
        EndpointCandidate(
            path='/asset/v1/content/assets',
            description='Asset API - email assets',
            params=(('assetType.name', 'email'),)
        ),
    ]

    CATEGORIES = {
        EMAIL_SENDS: EMAIL_SEND_CANDIDATES,
        TRACKING_EVENTS: TRACKING_EVENT_CANDIDATES,
    }

    def __init__(self, categories: Optional[Dict[str, List[EndpointCandidate]]] = None):
        source = categories if categories is not None else self.CATEGORIES
        self.categories = {name: list(candidates) for name, candidates in source.items()}

    def get_categories(self) -> List[str]:
        return list(self.categories)

    def get_candidates(self, category: str) -> List[EndpointCandidate]:
        if category not in self.categories:
            raise ValueError(f"Unknown endpoint category '{category}'")
        return list(self.categories[category])

    def register_candidates(self, category: str, candidates: List[EndpointCandidate], replace: bool = False):
        """Add candidates to the end of a category list (or replace the list)"""
        if replace or category not in self.categories:
            self.categories[category] = list(candidates)
        else:
            self.categories[category].extend(candidates)
