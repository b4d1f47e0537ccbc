# Dashboard API Routes
#
# Provides the endpoints consumed by the dashboard frontend.
# /api/dashboard always answers 200: failures are reported through the
# payload's `error`, `isRealData` and `sfmcConnected` fields.

from flask import Blueprint, jsonify, request
import logging

from ..services.dashboard_service import DashboardService
from ..services.upload_processor import UploadParseError

# Import timezone utilities for consistent timezone handling
from ...utils.timezone_utils import now_in_timezone, to_api_timestamp

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api')

# Initialize the dashboard service
dashboard_service = DashboardService()

DEFAULT_PERIOD = 30
MAX_PERIOD = 365

def parse_period(raw_period):
    """Requested period in days; anything unusable falls back to 30"""
    try:
        period = int(raw_period)
    except (TypeError, ValueError):
        return DEFAULT_PERIOD
    if period < 1 or period > MAX_PERIOD:
        return DEFAULT_PERIOD
    return period

@dashboard_bp.route('/dashboard', methods=['GET'])
def get_dashboard_data():
    """
    Get dashboard data for the requested period

    Query parameters:
        period: number of days (7, 30 or 90), defaults to 30
    """
    period = parse_period(request.args.get('period'))

    try:
        return jsonify(dashboard_service.get_dashboard_data(period))
    except Exception as e:
        logger.error(f"Error in get_dashboard_data: {str(e)}", exc_info=True)
        fallback = dashboard_service.composer.synthesizer.synthesize(
            period, error=f"Demo data - unexpected error: {str(e)}"
        )
        return jsonify(fallback)

@dashboard_bp.route('/upload', methods=['POST'])
def upload_csv():
    """
    Import campaign, tracking or send data from a CSV export

    Expected JSON payload:
    {
        "csvData": "Campaign Name,Sent,Opened\\n...",
        "dataType": "campaigns",      (optional: campaigns | tracking | sends)
        "currentData": {...}          (optional: payload to merge into)
    }
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return jsonify({
            'error': 'Failed to process CSV data',
            'details': 'Request body must be a JSON object'
        }), 400

    csv_data = data.get('csvData')
    if not csv_data or not isinstance(csv_data, str):
        return jsonify({
            'error': 'No CSV data provided',
            'details': 'csvData must be a non-empty string'
        }), 400

    current_data = data.get('currentData')
    if current_data is not None and not isinstance(current_data, dict):
        current_data = None

    try:
        result = dashboard_service.process_upload(csv_data, data.get('dataType') or None, current_data)
        return jsonify(result)

    except UploadParseError as e:
        logger.warning(f"❌ Error processing CSV upload: {str(e)}")
        return jsonify({
            'error': 'Failed to process CSV data',
            'details': str(e)
        }), 400

    except Exception as e:
        logger.error(f"Error processing CSV upload: {str(e)}", exc_info=True)
        return jsonify({
            'error': 'Failed to process CSV data',
            'details': str(e) or e.__class__.__name__
        }), 400

@dashboard_bp.route('/upload/manual', methods=['POST'])
def upload_manual():
    """
    Add manually entered campaigns

    Expected JSON payload:
    {
        "campaigns": [{"name": "...", "sent": "1000", "opened": "400", "clicked": "50",
                       "bounced": "10", "date": "2024-06-01"}],
        "currentData": {...}          (optional)
    }
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not isinstance(data.get('campaigns'), list):
        return jsonify({
            'error': 'Failed to process manual entry',
            'details': 'Request body must contain a campaigns list'
        }), 400

    current_data = data.get('currentData')
    if current_data is not None and not isinstance(current_data, dict):
        current_data = None

    try:
        return jsonify(dashboard_service.process_manual_entry(data['campaigns'], current_data))
    except UploadParseError as e:
        return jsonify({
            'error': 'Failed to process manual entry',
            'details': str(e)
        }), 400

@dashboard_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'ok',
        'timestamp': to_api_timestamp(now_in_timezone()),
        'authenticated': dashboard_service.is_authenticated()
    })
