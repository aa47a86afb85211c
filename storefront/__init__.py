"""
Storefront relevance service: product search and recommendations
"""

__version__ = "1.0.0"
