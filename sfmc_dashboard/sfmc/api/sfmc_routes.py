"""
SFMC API Routes

Diagnostic routes for the SFMC connection: a forced authentication test and
an endpoint explorer that reports which candidate REST surfaces respond on
this tenant.
"""

from flask import Blueprint, request, jsonify
import logging

from ...dashboard.api.dashboard_routes import dashboard_service, parse_period

logger = logging.getLogger(__name__)

# Create Blueprint for SFMC routes
sfmc_bp = Blueprint('sfmc', __name__, url_prefix='/api/sfmc')

@sfmc_bp.route('/test-connection', methods=['GET', 'POST'])
def test_connection():
    """Authenticate from scratch and report whether SFMC accepted the credentials"""
    try:
        return jsonify(dashboard_service.test_connection())
    except Exception as e:
        logger.error(f"Error testing SFMC connection: {str(e)}", exc_info=True)
        return jsonify({'success': False, 'message': str(e)}), 500

@sfmc_bp.route('/explore', methods=['GET'])
def explore_endpoints():
    """Probe every candidate endpoint, optionally limited to one category"""
    category = request.args.get('category') or None
    categories = dashboard_service.prober.catalog.get_categories()
    if category and category not in categories:
        return jsonify({
            'success': False,
            'error': f"Unknown category '{category}'",
            'categories': categories
        }), 400

    try:
        return jsonify(dashboard_service.explore_endpoints(category, parse_period(request.args.get('period'))))
    except Exception as e:
        logger.error(f"Error exploring SFMC endpoints: {str(e)}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500

@sfmc_bp.route('/endpoints', methods=['GET'])
def list_endpoints():
    """List the configured candidate endpoints per category"""
    catalog = dashboard_service.prober.catalog
    return jsonify({
        'catalogVersion': catalog.CATALOG_VERSION,
        'categories': {
            name: [
                {
                    'path': candidate.path,
                    'description': candidate.description,
                    'params': dict(candidate.params),
                    'dateFilter': candidate.date_filter
                }
                for candidate in catalog.get_candidates(name)
            ]
            for name in catalog.get_categories()
        }
    })
