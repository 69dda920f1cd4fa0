"""Configuration module for the domain role mapper."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
