"""
Runtime support shared by every layer: the error model.
"""

from .errors import *  # noqa: F401,F403
from .errors import __all__  # noqa: F401
