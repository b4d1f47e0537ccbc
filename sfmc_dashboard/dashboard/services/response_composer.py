# Dashboard Response Composer
#
# Turns the outcome of authentication and probing into the payload the
# frontend renders, and merges uploaded / manually entered campaign data
# into the same shape.

import copy
import logging
from typing import Any, Dict, List, Optional

from ...config import config
from ...sfmc.services.endpoint_catalog import count_items
from ...sfmc.services.endpoint_prober import ProbeResults
from ...utils.timezone_utils import now_in_timezone, to_api_timestamp
from .data_synthesizer import DEMO_ERROR, DataSynthesizer

logger = logging.getLogger(__name__)

# Terminal states of a dashboard request
DEMO_ONLY = 'DEMO_ONLY'
AUTH_FAILED = 'AUTH_FAILED'
CONNECTED_NO_DATA = 'CONNECTED_NO_DATA'
CONNECTED_WITH_DATA = 'CONNECTED_WITH_DATA'

# Upload provenance labels
SOURCE_CSV = 'CSV import'
SOURCE_MANUAL = 'Manual entry'

OVERVIEW_KEYS = ('totalSent', 'delivered', 'opened', 'clicked', 'bounced')

class ResponseComposer:
    """Builds the dashboard payload for each request outcome"""

    def __init__(self, synthesizer: Optional[DataSynthesizer] = None, settings=None):
        self.synthesizer = synthesizer or DataSynthesizer()
        self.settings = settings or config

    def compose(self, auth_result: bool, probe_results: Optional[ProbeResults], period: int,
                auth_error: Optional[str] = None) -> Dict[str, Any]:
        """
        Compose the payload for an authenticated (or not) dashboard request

        Args:
            auth_result: Whether the token manager produced a valid token
            probe_results: Results of probing both data categories (None if not probed)
            period: Requested period in days
            auth_error: Failure reason recorded by the token manager

        Returns:
            Dashboard payload with isRealData / sfmcConnected / connectionStatus / error set
        """
        probe_results = probe_results or ProbeResults()

        if not auth_result:
            reason = f"{DEMO_ERROR}: {auth_error}" if auth_error else DEMO_ERROR
            data = self.synthesizer.synthesize(period, error=reason)
            data['connectionStatus'] = 'Authentication failed'
            data['sfmcConnected'] = False
            return self._with_debug_info(data, AUTH_FAILED, probe_results, auth_working=False)

        if not probe_results.has_data:
            data = self.synthesizer.synthesize(
                period,
                error='Connected to SFMC - no data yet. Showing demo data because no API endpoint returned records '
                      '(check the installed package permissions)'
            )
            data['isRealData'] = self.settings.CONNECTED_NO_DATA_IS_REAL
            data['sfmcConnected'] = True
            data['connectionStatus'] = 'Connected with limited permissions'
            return self._with_debug_info(data, CONNECTED_NO_DATA, probe_results, auth_working=True)

        # Mapping of the SFMC response schema into dashboard metrics is not implemented yet:
        # the numbers stay synthesized while the payload is flagged as real.
        data = self.synthesizer.synthesize(period)
        data.pop('error', None)
        data['isRealData'] = True
        data['sfmcConnected'] = True
        data['connectionStatus'] = 'Connected'
        logger.info(f"📧 Received {count_items(probe_results.email_sends)} email sends")
        logger.info(f"📊 Received {count_items(probe_results.tracking_events)} tracking events")
        return self._with_debug_info(data, CONNECTED_WITH_DATA, probe_results, auth_working=True)

    def compose_demo_only(self, period: int, missing: List[str]) -> Dict[str, Any]:
        """Payload for a process running without SFMC credentials"""
        data = self.synthesizer.synthesize(
            period,
            error=f"Demo data - SFMC credentials not configured (missing: {', '.join(missing)})"
        )
        data['connectionStatus'] = 'Demo mode - SFMC credentials not configured'
        return self._with_debug_info(data, DEMO_ONLY, ProbeResults(), auth_working=False)

    def _with_debug_info(self, data: Dict[str, Any], state: str, probe_results: ProbeResults,
                         auth_working: bool) -> Dict[str, Any]:
        data['debugInfo'] = {
            'state': state,
            'authWorking': auth_working,
            'emailSendsFound': count_items(probe_results.email_sends),
            'trackingEventsFound': count_items(probe_results.tracking_events)
        }
        return data

    @staticmethod
    def empty_payload() -> Dict[str, Any]:
        """A payload with no campaigns, no trends and zeroed totals"""
        return {
            'overview': {key: 0 for key in OVERVIEW_KEYS},
            'trends': [],
            'campaigns': [],
            'isRealData': False,
            'sfmcConnected': False,
            'connectionStatus': 'No data',
            'lastUpdated': to_api_timestamp(now_in_timezone())
        }

    def merge_uploaded(self, existing: Optional[Dict[str, Any]], uploaded: Dict[str, Any],
                       source: str = SOURCE_CSV) -> Dict[str, Any]:
        """
        Merge uploaded data into a copy of an existing payload

        `uploaded` may carry `campaigns` (replaces the campaign list and
        recomputes the overview), `tracking` (replaces trends, opened and
        clicked) and `sends` (replaces sent, delivered and bounced totals).
        """
        merged = copy.deepcopy(existing) if existing else self.empty_payload()
        # currentData comes from the client; repair sections that are missing or of the wrong type
        if not isinstance(merged.get('overview'), dict):
            merged['overview'] = {key: 0 for key in OVERVIEW_KEYS}
        if not isinstance(merged.get('trends'), list):
            merged['trends'] = []
        if not isinstance(merged.get('campaigns'), list):
            merged['campaigns'] = []

        campaigns = uploaded.get('campaigns')
        if campaigns is not None:
            merged['campaigns'] = [dict(campaign) for campaign in campaigns]
            merged['overview'] = self.summarize_campaigns(campaigns)

        tracking = uploaded.get('tracking')
        if tracking is not None:
            merged['trends'] = sorted(tracking.get('trends', []), key=lambda entry: entry['date'])
            merged['overview']['opened'] = tracking.get('opened', 0)
            merged['overview']['clicked'] = tracking.get('clicked', 0)

        sends = uploaded.get('sends')
        if sends is not None:
            merged['overview']['totalSent'] = sends.get('totalSent', 0)
            merged['overview']['delivered'] = sends.get('delivered', 0)
            merged['overview']['bounced'] = sends.get('bounced', 0)

        merged['isRealData'] = True
        merged['sfmcConnected'] = True
        merged['connectionStatus'] = source
        merged['lastUpdated'] = to_api_timestamp(now_in_timezone())
        merged.pop('error', None)
        merged.pop('debugInfo', None)
        return merged

    @staticmethod
    def summarize_campaigns(campaigns: List[Dict[str, Any]]) -> Dict[str, int]:
        """Overview totals summed over campaign records"""
        overview = {key: 0 for key in OVERVIEW_KEYS}
        for campaign in campaigns:
            sent = campaign.get('sent') or 0
            overview['totalSent'] += sent
            delivered = campaign.get('delivered')
            overview['delivered'] += sent if delivered is None else delivered
            overview['opened'] += campaign.get('opened') or 0
            overview['clicked'] += campaign.get('clicked') or 0
            overview['bounced'] += campaign.get('bounced') or 0
        return overview
