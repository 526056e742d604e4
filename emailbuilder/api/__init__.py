# EmailBuilder API

from .main import create_app
from .config import get_settings, Settings

__all__ = [
    'create_app',
    'get_settings',
    'Settings',
]
