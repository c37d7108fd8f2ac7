"""
Utility modules for ReelBot
"""

# Export commonly used utilities
from .logger import logger, setup_logging
from .response_helpers import send_debug, build_embed

__all__ = [
    'logger',
    'setup_logging',
    'send_debug',
    'build_embed',
]
