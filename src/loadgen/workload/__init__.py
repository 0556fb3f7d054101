"""Simulated request workload: request model, timers and the load runner."""

from .load_runner import LoadTestRunner, RunEvent, RunEventKind, RunState
from .request import RequestFactory, SimulatedRequest
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "SimulatedRequest",
    "RequestFactory",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "LoadTestRunner",
    "RunEvent",
    "RunEventKind",
    "RunState",
]
