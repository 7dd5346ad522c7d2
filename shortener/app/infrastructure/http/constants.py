"""HTTP listener lifecycle states."""
from enum import Enum


class ListenerState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    DRAINING = "DRAINING"
    STOPPED = "STOPPED"
    FAILED = "FAILED"
