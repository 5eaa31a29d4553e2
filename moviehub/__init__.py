"""Catalog derivation and personalization sync for the MovieHub mobile client"""

__version__ = "1.0.0"
