# Dashboard Module
# 
# This module provides the dashboard data acquisition layer: SFMC data when
# the API is reachable, demo data when it is not, and CSV / manual uploads
# merged into the same payload shape.

from .api.dashboard_routes import dashboard_bp
from .services.dashboard_service import DashboardService
from .services.data_synthesizer import DataSynthesizer
from .services.response_composer import ResponseComposer
from .services.upload_processor import UploadProcessor

__all__ = [
    'dashboard_bp',
    'DashboardService',
    'DataSynthesizer',
    'ResponseComposer',
    'UploadProcessor'
]
