from shortener.app.lifecycle.constants import LifecycleState
from shortener.app.lifecycle.coordinator import LifecycleCoordinator

__all__ = ["LifecycleCoordinator", "LifecycleState"]
