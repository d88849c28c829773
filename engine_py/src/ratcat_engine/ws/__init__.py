"""
WebSocket event models for the Rat-a-Tat Cat server.
"""

from .events import *
from .events import EVENT_ACTIONS, parse_inbound_event

__all__ = ["EVENT_ACTIONS", "parse_inbound_event"]
