"""
bridge — message-passing layer between the UI ports and the document store.

Public API
──────────
PersistenceBridge — serves save / list / get requests
BridgePorts, Port — inbound and outbound message channels
messages          — request and response message types
"""

from dodvault.bridge.bridge import PersistenceBridge
from dodvault.bridge.ports import BridgePorts, Port
from dodvault.bridge import messages

__all__ = ["BridgePorts", "PersistenceBridge", "Port", "messages"]
