"""Per-user listing workflow."""

from .steps import SUCCESSORS, Step, form_id, parse_form_id
from .state import WorkflowState, WorkflowStore
from .engine import MarketplaceWorkflow

__all__ = [
    "MarketplaceWorkflow",
    "SUCCESSORS",
    "Step",
    "WorkflowState",
    "WorkflowStore",
    "form_id",
    "parse_form_id",
]
