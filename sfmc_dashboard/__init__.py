"""
SFMC Email Dashboard backend.

Serves email campaign metrics from Salesforce Marketing Cloud, falling back
to demo data when the API is unavailable, plus CSV and manual data imports.
"""

__version__ = "1.0.0"
