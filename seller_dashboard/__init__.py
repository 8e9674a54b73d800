"""
Seller Dashboard
Multi-account session layer and data hooks for the marketplace seller backend.
"""

__version__ = "1.0.0"
