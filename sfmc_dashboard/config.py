#!/usr/bin/env python3
"""
Configuration module for the SFMC Email Dashboard
Reads from environment variables with fallbacks to .env file
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).resolve().parent.parent
env_file = project_root / '.env'
load_dotenv(env_file)

# Also try to load from package directory as fallback
env_path = Path(__file__).parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _env(name, default=''):
    """Read SFMC_* settings, accepting the VITE_SFMC_* names used by the frontend build"""
    return os.getenv(name) or os.getenv(f'VITE_{name}') or default


class Config:
    """Configuration class that reads from environment variables"""

    # SFMC Credentials
    SFMC_CLIENT_ID = _env('SFMC_CLIENT_ID')
    SFMC_CLIENT_SECRET = _env('SFMC_CLIENT_SECRET')
    SFMC_SUBDOMAIN = _env('SFMC_SUBDOMAIN')
    SFMC_ACCOUNT_ID = _env('SFMC_ACCOUNT_ID')
    SFMC_SCOPE = _env('SFMC_SCOPE')

    # Pre-provisioned token, bypasses the client-credentials flow entirely
    SFMC_MANUAL_TOKEN = _env('SFMC_MANUAL_TOKEN') or None

    # SFMC API Configuration
    SFMC_AUTH_URL = _env('SFMC_AUTH_URL', f'https://{SFMC_SUBDOMAIN}.auth.marketingcloudapis.com')
    SFMC_BASE_URL = _env('SFMC_BASE_URL', f'https://{SFMC_SUBDOMAIN}.rest.marketingcloudapis.com')
    SFMC_REQUEST_TIMEOUT = float(_env('SFMC_REQUEST_TIMEOUT', '15'))
    SFMC_PROBE_BUDGET = float(_env('SFMC_PROBE_BUDGET', '45'))
    SFMC_PAGE_SIZE = int(_env('SFMC_PAGE_SIZE', '10'))
    SFMC_TOKEN_SAFETY_MARGIN = int(_env('SFMC_TOKEN_SAFETY_MARGIN', '300'))
    SFMC_MANUAL_TOKEN_TTL = int(_env('SFMC_MANUAL_TOKEN_TTL', str(24 * 60 * 60)))

    # Dashboard Configuration
    DEFAULT_PERIOD = int(os.getenv('DEFAULT_PERIOD', '30'))
    CONNECTED_NO_DATA_IS_REAL = os.getenv('CONNECTED_NO_DATA_IS_REAL', 'false').lower() == 'true'

    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'

    # Server Configuration
    HOST = os.getenv('HOST', '0.0.0.0' if os.getenv('FLASK_ENV') == 'production' else 'localhost')
    PORT = int(os.getenv('PORT', '3001'))

    # Timezones
    DEFAULT_TIMEZONE = os.getenv('DEFAULT_TIMEZONE', 'UTC')
    DISPLAY_TIMEZONE = os.getenv('DISPLAY_TIMEZONE', DEFAULT_TIMEZONE)

    # Allowed Origins for CORS
    ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', 'http://localhost:5173,http://localhost:3001').split(',')

    @property
    def is_production(self):
        """Check if running in production environment"""
        return self.FLASK_ENV == 'production' or os.getenv('VERCEL') is not None

    @property
    def is_development(self):
        return self.FLASK_ENV == 'development'

    def missing_credentials(self):
        """Names of the settings still needed before SFMC can be contacted"""
        missing = []
        if not self.SFMC_SUBDOMAIN:
            missing.append('SFMC_SUBDOMAIN')
        if self.SFMC_MANUAL_TOKEN:
            return missing
        if not self.SFMC_CLIENT_ID:
            missing.append('SFMC_CLIENT_ID')
        if not self.SFMC_CLIENT_SECRET:
            missing.append('SFMC_CLIENT_SECRET')
        return missing

    @property
    def sfmc_configured(self):
        return not self.missing_credentials()

# Create singleton instance
config = Config()
