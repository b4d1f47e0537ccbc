# Dashboard Service
#
# Main service for dashboard functionality: authenticates against SFMC,
# probes for real data, falls back to demo data and merges uploads.

import logging
from typing import Any, Dict, List, Optional

import requests

from ...config import config
from ...sfmc.services.endpoint_catalog import EndpointCatalog
from ...sfmc.services.endpoint_prober import EndpointProber
from ...sfmc.services.token_manager import TokenManager
from .data_synthesizer import DataSynthesizer
from .response_composer import SOURCE_CSV, SOURCE_MANUAL, ResponseComposer
from .upload_processor import UploadProcessor

logger = logging.getLogger(__name__)

class DashboardService:
    """Main service for dashboard data operations"""

    def __init__(self, settings=None, session: Optional[requests.Session] = None,
                 token_manager: Optional[TokenManager] = None,
                 prober: Optional[EndpointProber] = None,
                 synthesizer: Optional[DataSynthesizer] = None,
                 catalog: Optional[EndpointCatalog] = None):
        self.settings = settings or config
        self.token_manager = token_manager or TokenManager(settings=self.settings, session=session)
        self.prober = prober or EndpointProber(self.token_manager, catalog=catalog, settings=self.settings)
        self.composer = ResponseComposer(synthesizer=synthesizer, settings=self.settings)
        self.upload_processor = UploadProcessor()

        self.missing_credentials = self.settings.missing_credentials()
        self.demo_only = bool(self.missing_credentials)
        if self.demo_only:
            logger.warning(f"⚠️ Missing SFMC credentials ({', '.join(self.missing_credentials)}) - demo mode only")

    def get_dashboard_data(self, period: int) -> Dict[str, Any]:
        """
        Get dashboard data for the last `period` days

        Never raises: every failure ends up as a demo payload whose
        `error` field explains what happened.
        """
        logger.info(f"📊 Dashboard data requested for {period} days")

        if self.demo_only:
            return self.composer.compose_demo_only(period, self.missing_credentials)

        try:
            authenticated = self.token_manager.ensure_authenticated()
            if not authenticated:
                logger.info("🔄 Authentication failed, returning demo data")
                return self.composer.compose(False, None, period, auth_error=self.token_manager.last_error)

            logger.info("🚀 Fetching real data from SFMC...")
            probe_results = self.prober.fetch_all(period)

            if probe_results.has_data:
                logger.info("✅ Returning SFMC-connected data")
            else:
                logger.info("🔄 Using demo data (SFMC connected but no endpoint returned records)")

            return self.composer.compose(True, probe_results, period)

        except Exception as e:
            logger.error(f"❌ Error fetching dashboard data: {str(e)}", exc_info=True)
            return self.composer.synthesizer.synthesize(period, error=f"Demo data - unexpected error: {str(e)}")

    def is_authenticated(self) -> bool:
        return self.token_manager.is_authenticated

    def test_connection(self) -> Dict[str, Any]:
        """Force a fresh authentication and report the outcome"""
        result = {
            'subdomain': self.settings.SFMC_SUBDOMAIN,
            'authUrl': self.token_manager.token_url
        }

        if self.demo_only:
            result.update({
                'success': False,
                'message': f"Missing SFMC credentials: {', '.join(self.missing_credentials)}"
            })
            return result

        if self.settings.SFMC_MANUAL_TOKEN:
            success = self.token_manager.ensure_authenticated()
        else:
            self.token_manager.invalidate()
            success = self.token_manager.authenticate()

        result.update({
            'success': success,
            'message': 'Successfully connected to SFMC' if success else self.token_manager.last_error,
            'baseUrl': self.token_manager.base_url
        })
        return result

    def explore_endpoints(self, category: Optional[str] = None, period: int = 30) -> Dict[str, Any]:
        """Probe every candidate endpoint and report what the tenant exposes"""
        if self.demo_only:
            return {
                'success': False,
                'error': f"Missing SFMC credentials: {', '.join(self.missing_credentials)}"
            }

        if not self.token_manager.ensure_authenticated():
            return {'success': False, 'error': self.token_manager.last_error}

        report = self.prober.explore(category=category, period=period)
        return {
            'success': True,
            'catalogVersion': self.prober.catalog.CATALOG_VERSION,
            'endpoints': report,
            'available': [entry['path'] for entry in report if entry['ok']]
        }

    def process_upload(self, csv_text: str, data_type: Optional[str] = None,
                       current_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Parse an uploaded CSV and merge it into the dashboard payload

        Raises:
            UploadParseError: the CSV could not be parsed or mapped
        """
        processed = self.upload_processor.process(csv_text, data_type)
        dashboard = self.composer.merge_uploaded(current_data, processed, source=SOURCE_CSV)
        return {
            'success': True,
            'message': f"Successfully processed {processed['records']} records",
            'data': processed,
            'recordCount': processed['records'],
            'dashboard': dashboard
        }

    def process_manual_entry(self, entries: List[Dict[str, Any]],
                             current_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Merge manually entered campaigns into the dashboard payload

        Raises:
            UploadParseError: no entry had both a name and a sent count
        """
        campaigns = self.upload_processor.build_manual_campaigns(entries)
        dashboard = self.composer.merge_uploaded(current_data, {'campaigns': campaigns}, source=SOURCE_MANUAL)
        return {
            'success': True,
            'message': f"Successfully added {len(campaigns)} campaigns",
            'data': {'type': 'campaigns', 'records': len(campaigns), 'campaigns': campaigns},
            'recordCount': len(campaigns),
            'dashboard': dashboard
        }
