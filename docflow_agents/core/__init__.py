"""
Core utilities and configuration for docflow_agents.

This package provides core functionality including logging configuration,
settings, the error hierarchy and the configuration models.
"""

from docflow_agents.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
