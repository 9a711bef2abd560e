"""
Episode Workflow

    compose → generate → evaluate-and-revise → notify

- compose: summarizes a long previous episode, then builds the writing brief
- generate: the episode generator drafts from the brief
- evaluate-and-revise: the character panel scores the draft; any low score
  triggers exactly one revision pass. The revised text is not re-evaluated.
- notify: delivers the final text; a failed delivery is reported in the
  output, not raised

Each stage's input and output are checked by the Workflow (see steps.py).
"""

import logging
from typing import Optional

from episode_studio.agents import create_episode_generator_agent, create_summary_agent
from episode_studio.config import Settings, get_settings
from episode_studio.models import (
    EpisodeWorkflowInput,
    EpisodeWorkflowOutput,
    DraftEnvelope,
    ReviewedEnvelope,
    GeneratedEpisode,
    EpisodeSummary,
)
from episode_studio.prompts.summary import get_summarize_episode_prompt
from episode_studio.prompts.writing import compose_episode_prompt, get_revise_episode_prompt
from episode_studio.services.evaluation_service import EvaluationService
from episode_studio.services.generation import GenerationAdapter, LiteLLMBackend
from episode_studio.services.notification import NotificationDispatcher
from episode_studio.services.revision_service import decide
from episode_studio.workflows.steps import RunContext, Step, Workflow

logger = logging.getLogger(__name__)

WORKFLOW_ID = "episode-workflow"


class EpisodePipeline:
    """Holds the collaborators the stages need and exposes each stage as a Step."""

    def __init__(
        self,
        adapter: GenerationAdapter,
        dispatcher: NotificationDispatcher,
        settings: Optional[Settings] = None
    ):
        self.adapter = adapter
        self.dispatcher = dispatcher
        self.settings = settings or get_settings()
        self.evaluation_service = EvaluationService(adapter)
        self.generator = create_episode_generator_agent(self.settings.output_language)

    # ===== compose =====

    def _needs_summary(self, previous_content: Optional[str]) -> bool:
        if not previous_content:
            return False
        return len(previous_content) > self.settings.previous_episode_summary_threshold

    async def summarize_previous_episode(self, previous_content: str) -> str:
        """Condense a previous episode for the writing brief."""
        logger.info(f"📝 Summarizing previous episode ({len(previous_content)} chars)")
        result = await self.adapter.run_agent(
            create_summary_agent(),
            get_summarize_episode_prompt(previous_content),
            EpisodeSummary,
        )
        return result.summary

    async def compose(self, data: EpisodeWorkflowInput, context: RunContext) -> DraftEnvelope:
        episode = data.episode
        if self._needs_summary(episode.previous_episode_content):
            summary = await self.summarize_previous_episode(episode.previous_episode_content)
            episode = episode.model_copy(update={"previous_episode_content": summary})
            context.state["previous_episode_summarized"] = True

        prompt = compose_episode_prompt(
            data.story,
            episode,
            data.characters,
            output_language=self.settings.output_language,
        )
        return DraftEnvelope(content=prompt, characters=data.characters, recipient_id=data.recipient_id)

    # ===== generate =====

    async def generate(self, data: DraftEnvelope, context: RunContext) -> DraftEnvelope:
        episode = await self.adapter.run_agent(self.generator, data.content, GeneratedEpisode)
        logger.info(f"✍️ Draft generated ({len(episode.content)} chars)")
        return DraftEnvelope(content=episode.content, characters=data.characters, recipient_id=data.recipient_id)

    # ===== evaluate-and-revise =====

    async def revise(self, content: str, revision_feedback: str) -> str:
        """The single revision pass."""
        prompt = get_revise_episode_prompt(content, revision_feedback, self.settings.output_language)
        revised = await self.adapter.run_agent(self.generator, prompt, GeneratedEpisode)
        return revised.content

    async def evaluate_and_revise(self, data: DraftEnvelope, context: RunContext) -> ReviewedEnvelope:
        evaluations = await self.evaluation_service.evaluate_all(data.content, data.characters)
        decision = decide(evaluations)
        context.state["revision_decision"] = decision

        # Accept
        if not decision.needs_revision:
            return ReviewedEnvelope(
                content=data.content,
                evaluations=evaluations,
                is_revised=False,
                recipient_id=data.recipient_id,
            )

        # Revise → Accept
        revised_content = await self.revise(data.content, decision.revision_feedback)
        logger.info(f"🔄 Episode revised (min score {decision.min_score:.1f}, "
                    f"avg {decision.average_score:.1f})")
        return ReviewedEnvelope(
            content=revised_content,
            evaluations=evaluations,
            is_revised=True,
            recipient_id=data.recipient_id,
        )

    # ===== notify =====

    async def notify(self, data: ReviewedEnvelope, context: RunContext) -> EpisodeWorkflowOutput:
        delivery = await self.dispatcher.notify(data.content, data.recipient_id)
        context.studio_logger.delivery(context.run_id, delivery.success, delivery.channel, delivery.error)
        return EpisodeWorkflowOutput(
            content=data.content,
            evaluations=data.evaluations,
            is_revised=data.is_revised,
            delivery=delivery,
        )

    def steps(self):
        return [
            Step(
                id="compose",
                description="Build the writing brief from story, episode and cast",
                input_model=EpisodeWorkflowInput,
                output_model=DraftEnvelope,
                execute=self.compose,
            ),
            Step(
                id="generate",
                description="Draft the episode",
                input_model=DraftEnvelope,
                output_model=DraftEnvelope,
                execute=self.generate,
            ),
            Step(
                id="evaluate-and-revise",
                description="Character panel review with at most one revision",
                input_model=DraftEnvelope,
                output_model=ReviewedEnvelope,
                execute=self.evaluate_and_revise,
            ),
            Step(
                id="notify",
                description="Deliver the final episode",
                input_model=ReviewedEnvelope,
                output_model=EpisodeWorkflowOutput,
                execute=self.notify,
            ),
        ]


def build_episode_workflow(
    adapter: Optional[GenerationAdapter] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    settings: Optional[Settings] = None
) -> Workflow:
    """
    Assemble the committed episode workflow.

    Args:
        adapter: Generation Adapter (default: LiteLLM backend routed by models.yaml)
        dispatcher: Notification Dispatcher (default: built from settings)
        settings: Application settings (default: get_settings())

    Returns:
        Committed Workflow taking EpisodeWorkflowInput, returning EpisodeWorkflowOutput
    """
    settings = settings or get_settings()
    adapter = adapter or GenerationAdapter(LiteLLMBackend())
    dispatcher = dispatcher or NotificationDispatcher.from_settings(settings)

    pipeline = EpisodePipeline(adapter, dispatcher, settings)
    workflow = Workflow(WORKFLOW_ID, EpisodeWorkflowInput, EpisodeWorkflowOutput)
    for step in pipeline.steps():
        workflow.then(step)
    return workflow.commit()
