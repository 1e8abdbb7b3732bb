from reworkit.worker.client import CollectorClient
from reworkit.worker.cycle import BuildWorker, CycleReport

__all__ = [
    "CollectorClient",
    "BuildWorker",
    "CycleReport",
]
