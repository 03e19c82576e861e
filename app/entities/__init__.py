"""
Entities package for the shop product API.
Plain data structures shared between the HTTP layer and services.
"""

from .page import Page, PageRequest

__all__ = ["Page", "PageRequest"]
