"""Configuration module for the tax form pipeline."""

from .settings import PipelineSettings, get_settings

__all__ = [
    "PipelineSettings",
    "get_settings",
]
