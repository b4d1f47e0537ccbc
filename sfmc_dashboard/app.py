from flask import Flask, jsonify
from flask_cors import CORS
import logging

# Import configuration
from sfmc_dashboard.config import config

# Import timezone utilities for consistent timezone handling
from sfmc_dashboard.utils.timezone_utils import now_in_timezone, format_for_display

# Import dashboard blueprint
from sfmc_dashboard.dashboard.api.dashboard_routes import dashboard_bp, dashboard_service
# Import sfmc blueprint
from sfmc_dashboard.sfmc.api.sfmc_routes import sfmc_bp

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = config.SECRET_KEY

# Register dashboard blueprint
app.register_blueprint(dashboard_bp)
# Register sfmc blueprint
app.register_blueprint(sfmc_bp)

# Enable CORS for the API routes so the frontend dev server can call them
CORS(app, origins=config.ALLOWED_ORIGINS,
     allow_headers=['Content-Type', 'Authorization'],
     methods=['GET', 'POST', 'OPTIONS'])

@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Not found'}), 404

@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify({'error': 'Method not allowed'}), 405

def startup_check():
    """Log the configuration mode and try to authenticate once"""
    logger.info(f"🚀 SFMC Dashboard Backend starting at {format_for_display(now_in_timezone())}")

    # The missing-credentials warning was already logged when the service was built
    if dashboard_service.demo_only:
        return False

    logger.info(f"🔧 Environment: configured for subdomain {config.SFMC_SUBDOMAIN}")
    if dashboard_service.token_manager.ensure_authenticated():
        logger.info("🎉 Ready to serve real SFMC data")
        return True

    logger.warning("⚠️  Will serve demo data only until authentication succeeds")
    return False

if __name__ == '__main__':
    startup_check()
    logger.info(f"🚀 SFMC Dashboard Backend running on http://{config.HOST}:{config.PORT}")
    app.run(host=config.HOST, port=config.PORT, debug=config.FLASK_DEBUG)
