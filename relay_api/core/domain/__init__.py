from .connection import Connection, Role, SendHandle, SubscriptionHandle
from .reading import Command, IotMessage, TankReading

__all__ = [
    "Command",
    "Connection",
    "IotMessage",
    "Role",
    "SendHandle",
    "SubscriptionHandle",
    "TankReading",
]
