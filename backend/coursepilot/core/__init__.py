"""Core module - logging setup and shared helpers."""

from .logging_config import setup_logging, SessionLoggerAdapter, truncate_large_data

__all__ = ['setup_logging', 'SessionLoggerAdapter', 'truncate_large_data']
