"""
Storefront Engines Package

- recommendation: product search, related products and personalization
"""

__version__ = "1.0.0"
