"""Services package for the wealth projection engine."""

from .allocation_service import AllocationService
from .data_service import DataService
from .debt_service import DebtService
from .event_service import EventService
from .projection_service import ProjectionService
from .simulation_controller import SimulationController

__all__ = [
    "AllocationService",
    "DataService",
    "DebtService",
    "EventService",
    "ProjectionService",
    "SimulationController",
]
