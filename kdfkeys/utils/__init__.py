"""
Utilities Package

Logging setup shared by all kdfkeys components.
"""

from .logger import logger, log_service, enable_console_logging, disable_console_logging

__all__ = ['logger', 'log_service', 'enable_console_logging', 'disable_console_logging']
