"""Workflows package for Episode Studio"""

from .steps import Step, Workflow, RunContext
from .episode_workflow import EpisodePipeline, build_episode_workflow, WORKFLOW_ID

__all__ = [
    "Step",
    "Workflow",
    "RunContext",
    "EpisodePipeline",
    "build_episode_workflow",
    "WORKFLOW_ID",
]
