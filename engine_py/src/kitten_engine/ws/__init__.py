"""
WebSocket gateway and event handling for the Exploding Kittens room engine.
"""

from .events import *
from .server import app

__all__ = ["app"]
