"""Configuration package for the trade insights service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
