"""
Generation Adapter

Wraps an opaque text-generation backend: send role-tagged messages plus an
output schema, get back a validated Pydantic object.

Architecture:
- GenerationBackend: anything with `async complete(messages, agent_name) -> str`
- LiteLLMBackend: default backend, model chosen per agent by LLMRouter
- GenerationAdapter: appends the JSON schema, calls the backend, validates

Validation happens here, after the call, against locally defined models,
so the pipeline does not depend on which backend produced the text.
Failed calls and schema failures are surfaced to the caller, never retried.

Usage:
    adapter = GenerationAdapter(LiteLLMBackend())
    episode = await adapter.generate(messages, GeneratedEpisode, agent_name="episode_generator")
"""

import json
import time
import logging
from typing import Dict, List, Optional, Protocol, Type, TypeVar

import litellm
from pydantic import BaseModel

from episode_studio.agents.base import AgentProfile
from episode_studio.services.llm_router import LLMRouter, get_llm_router
from episode_studio.services.logger import EpisodeStudioLogger, get_logger
from episode_studio.services.validation_service import parse_structured_output

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GenerationBackend(Protocol):
    """The opaque text-generation capability"""

    async def complete(self, messages: List[Dict[str, str]], agent_name: str) -> str:
        ...


class LiteLLMBackend:
    """Backend that routes each agent to its configured model through LiteLLM"""

    def __init__(
        self,
        router: Optional[LLMRouter] = None,
        studio_logger: Optional[EpisodeStudioLogger] = None
    ):
        self.router = router or get_llm_router()
        self.studio_logger = studio_logger or get_logger()

    async def complete(self, messages: List[Dict[str, str]], agent_name: str) -> str:
        llm_kwargs = self.router.get_llm_kwargs(agent_name)
        model = llm_kwargs["model"]

        start = time.time()
        try:
            response = await litellm.acompletion(
                messages=messages,
                response_format={"type": "json_object"},
                **llm_kwargs
            )
        except Exception as e:
            logger.error(f"LLM call failed for {agent_name} ({model}): {e}")
            self.studio_logger.llm_api_call(model, latency=time.time() - start, status="error")
            raise

        latency = time.time() - start
        usage = getattr(response, "usage", None)
        self.studio_logger.llm_api_call(
            model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            latency=latency,
        )
        logger.info(f"🤖 {agent_name}: {model} responded in {latency:.1f}s")

        return response.choices[0].message.content or ""


class GenerationAdapter:
    """Calls the backend and validates its output against a schema"""

    def __init__(
        self,
        backend: GenerationBackend,
        studio_logger: Optional[EpisodeStudioLogger] = None
    ):
        self.backend = backend
        self.studio_logger = studio_logger or get_logger()

    @staticmethod
    def _with_schema(messages: List[Dict[str, str]], output_model: Type[BaseModel]) -> List[Dict[str, str]]:
        """Return a copy of messages whose system message carries the JSON schema."""
        schema = json.dumps(output_model.model_json_schema(by_alias=True), ensure_ascii=False, indent=2)
        instruction = (
            "Respond with a single JSON object that conforms to this JSON Schema. "
            "Output only the JSON.\n"
            f"{schema}"
        )

        result = [dict(m) for m in messages]
        for message in result:
            if message.get("role") == "system":
                message["content"] = f"{message['content']}\n\n{instruction}"
                return result
        return [{"role": "system", "content": instruction}] + result

    async def generate(
        self,
        messages: List[Dict[str, str]],
        output_model: Type[ModelT],
        agent_name: str
    ) -> ModelT:
        """
        Generate structured output.

        Args:
            messages: Role-tagged messages
            output_model: Pydantic model the output must satisfy
            agent_name: Router key used to pick the model

        Returns:
            Validated output_model instance

        Raises:
            SchemaValidationError: if the backend output fails validation
        """
        prompt_messages = self._with_schema(messages, output_model)
        self.studio_logger.agent_input(agent_name, prompt_messages[-1]["content"])

        start = time.time()
        raw_output = await self.backend.complete(prompt_messages, agent_name=agent_name)
        try:
            result = parse_structured_output(raw_output, output_model)
        except Exception:
            self.studio_logger.agent_output(agent_name, raw_output, status="schema_error",
                                            duration=time.time() - start)
            raise

        self.studio_logger.agent_output(agent_name, raw_output, duration=time.time() - start)
        return result

    async def run_agent(self, agent: AgentProfile, user_prompt: str, output_model: Type[ModelT]) -> ModelT:
        """Generate with an agent's system instructions and one user prompt."""
        return await self.generate(agent.build_messages(user_prompt), output_model, agent_name=agent.name)
