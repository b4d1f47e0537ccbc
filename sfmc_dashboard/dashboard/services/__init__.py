# Dashboard Services Module
# 
# Contains business logic services for dashboard functionality

from .dashboard_service import DashboardService
from .data_synthesizer import DataSynthesizer
from .response_composer import ResponseComposer
from .upload_processor import UploadParseError, UploadProcessor

__all__ = [
    'DashboardService',
    'DataSynthesizer',
    'ResponseComposer',
    'UploadParseError',
    'UploadProcessor'
]
