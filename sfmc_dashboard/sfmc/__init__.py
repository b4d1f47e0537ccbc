"""
SFMC API Integration Module

This module provides the Salesforce Marketing Cloud integration:
- Token management for the client-credentials flow
- Endpoint probing across the candidate REST surfaces
- Connection testing and endpoint exploration routes
"""

from .services import *

__version__ = "1.0.0"
__author__ = "Email Dashboard Team"
