# SFMC API Module
# 
# Contains Flask Blueprint for SFMC diagnostic routes

from .sfmc_routes import sfmc_bp

__all__ = ['sfmc_bp']
