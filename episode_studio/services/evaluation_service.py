"""
Evaluation Service - the character panel

Every character reads the draft and scores it from their own point of view.
All evaluations run concurrently and the panel waits for every one of them:

1. Each character's profile becomes an immutable CharacterPersona
2. One Generation Adapter call per persona, all started together
3. Results come back in cast order, whatever order the calls finish in
4. The first failure cancels the rest and propagates (no partial panel)

No per-character timeout or retry is applied here.
"""

import asyncio
import logging
from typing import List, Sequence

from episode_studio.agents.character_evaluator import CharacterPersona, create_character_evaluator_agent
from episode_studio.models import CharacterProfile, CharacterEvaluation, EvaluationResponse
from episode_studio.prompts.reviews import get_evaluate_episode_prompt
from episode_studio.services.generation import GenerationAdapter

logger = logging.getLogger(__name__)

# totalScore more than this far from the breakdown mean gets a warning
SCORE_DRIFT_WARNING = 1.0


class EvaluationService:
    """Fans a draft out to one evaluator per character"""

    def __init__(self, adapter: GenerationAdapter):
        self.adapter = adapter

    async def evaluate_character(self, content: str, persona: CharacterPersona) -> CharacterEvaluation:
        """
        Run one character's evaluation.

        Args:
            content: Episode draft
            persona: Configuration for this character, passed by value

        Returns:
            CharacterEvaluation attributed to persona.name
        """
        agent = create_character_evaluator_agent(persona)
        response = await self.adapter.run_agent(
            agent,
            get_evaluate_episode_prompt(content),
            EvaluationResponse,
        )

        drift = abs(response.total_score - response.breakdown.mean())
        if drift > SCORE_DRIFT_WARNING:
            logger.warning(
                f"⚠️ {persona.name}: totalScore {response.total_score} is {drift:.1f} "
                f"away from breakdown mean {response.breakdown.mean():.1f} (kept as reported)"
            )

        return CharacterEvaluation(character_name=persona.name, **response.model_dump())

    async def evaluate_all(
        self,
        content: str,
        characters: Sequence[CharacterProfile]
    ) -> List[CharacterEvaluation]:
        """
        Evaluate the draft from every character's point of view, concurrently.

        Args:
            content: Episode draft
            characters: Cast, in the order results should be returned

        Returns:
            One evaluation per character, in input order

        Raises:
            Whatever the first failing evaluation raised; outstanding
            evaluations are cancelled and no partial results are returned.
        """
        if not characters:
            logger.info("🎭 No characters on the panel, skipping evaluation")
            return []

        personas = [CharacterPersona.from_profile(c) for c in characters]
        logger.info(f"🎭 Panel evaluating draft: {', '.join(p.name for p in personas)}")

        tasks = [
            asyncio.ensure_future(self.evaluate_character(content, persona))
            for persona in personas
        ]
        try:
            evaluations = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Let cancelled tasks finish unwinding before propagating
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for evaluation in evaluations:
            logger.info(f"   • {evaluation.character_name}: {evaluation.total_score:.1f}")

        return list(evaluations)
