"""
Configuration package for travelpay
Exports settings from settings.py for easy import
"""
from .settings import settings, get_settings

__all__ = ["settings", "get_settings"]
