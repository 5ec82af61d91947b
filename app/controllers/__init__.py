"""
Controllers for ngspicex.

This package contains UI-free controller classes that orchestrate
simulation runs and console commands, notifying views through an
observer pattern.
"""

from .console_controller import ConsoleController
from .simulation_controller import (
    AlreadyRunningError,
    CommandPendingError,
    NetlistHasErrors,
    SimulationController,
    SimulationError,
)

__all__ = [
    "AlreadyRunningError",
    "CommandPendingError",
    "ConsoleController",
    "NetlistHasErrors",
    "SimulationController",
    "SimulationError",
]
