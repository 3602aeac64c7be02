"""lineageflow: canonical lineage graph state + renderer synchronization."""

import logging
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lineageflow")
except PackageNotFoundError:
    __version__ = "dev"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API exports
from lineageflow.api import load_document, save_document, project_document
from lineageflow.codes import OutcomeCode
from lineageflow.config import EngineConfig
from lineageflow.contracts import ImportSummary, IntentOutcome
from lineageflow.errors import LineageError, LineageIOError, IntentRejected
from lineageflow.kernel.model import GraphDocument
from lineageflow.sync import SyncController

__all__ = [
    "__version__",
    "load_document",
    "save_document",
    "project_document",
    "OutcomeCode",
    "EngineConfig",
    "ImportSummary",
    "IntentOutcome",
    "LineageError",
    "LineageIOError",
    "IntentRejected",
    "GraphDocument",
    "SyncController",
]
