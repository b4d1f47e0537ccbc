# Dashboard API Module
# 
# Contains Flask Blueprint for dashboard API routes

from .dashboard_routes import dashboard_bp

__all__ = ['dashboard_bp']
