"""
API routes for Episode Studio

POST /api/workflows/episode runs the whole episode workflow and returns the
final content, the panel's evaluations, whether a revision happened and the
delivery outcome.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from episode_studio.models import EpisodeWorkflowOutput
from episode_studio.services.errors import (
    InputValidationError,
    SchemaValidationError,
    ContractViolationError,
)
from episode_studio.workflows.steps import Workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["workflows"])

# Global workflow (set by main app)
_workflow: Optional[Workflow] = None


def set_workflow(workflow: Optional[Workflow]):
    """Set the global workflow instance"""
    global _workflow
    _workflow = workflow


def get_workflow() -> Optional[Workflow]:
    """Get the global workflow instance"""
    return _workflow


@router.post("/workflows/episode", response_model=EpisodeWorkflowOutput)
async def run_episode_workflow(payload: Dict[str, Any]):
    """
    Generate, review and deliver one episode.

    The body is validated by the workflow itself so that malformed input is
    reported the same way for API and CLI callers.
    """
    if _workflow is None:
        raise HTTPException(status_code=500, detail="Workflow not initialized")

    run_id = str(uuid.uuid4())
    logger.info(f"🎬 [{run_id[:8]}] Episode workflow requested")

    try:
        return await _workflow.run(payload, run_id=run_id)
    except InputValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except SchemaValidationError as e:
        raise HTTPException(status_code=502, detail=f"Model output rejected: {e}")
    except ContractViolationError as e:
        logger.error(f"❌ [{run_id[:8]}] {e}")
        raise HTTPException(status_code=500, detail=f"Pipeline contract violated at '{e.step_id}'")
