"""
LLM Router Service

Handles:
1. Model configuration loading from YAML
2. Hierarchy resolution (Agent > Group > Default)
3. Environment variable overrides for A/B testing
4. Provider-specific parameter constraints (Claude, OpenAI reasoning models)

Usage:
    from episode_studio.services.llm_router import get_llm_router

    router = get_llm_router()
    kwargs = router.get_llm_kwargs("character_evaluator")  # ready for litellm.acompletion
    model = router.get_model_for_agent("episode_generator")
"""

import os
import yaml
import logging
from typing import Dict, Optional, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "models.yaml"


class LLMRouter:
    """Per-agent model routing with provider-aware parameter handling"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize LLM Router.

        Args:
            config_path: Path to models.yaml. If None, uses the bundled
                         episode_studio/config/models.yaml
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.config = self._load_config(self.config_path)
        self._apply_env_overrides()

    def _load_config(self, config_path: Path) -> dict:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def _apply_env_overrides(self):
        """
        Apply environment variable overrides.

        - TEST_<GROUP_NAME>_MODEL: Override all agents in a group
        - TEST_<AGENT_NAME>_MODEL: Override one agent
        """
        for group_name in self.config.get("groups", {}):
            env_value = os.getenv(f"TEST_{group_name.upper()}_MODEL")
            if env_value:
                self.config["groups"][group_name]["model"] = env_value
                logger.info(f"🔬 A/B Override: {group_name} group → {env_value}")

        for agent_name in self.config.get("agents", {}):
            env_value = os.getenv(f"TEST_{agent_name.upper()}_MODEL")
            if env_value:
                self.config["agents"][agent_name]["model"] = env_value
                logger.info(f"🔬 A/B Override: {agent_name} → {env_value}")

    def _normalize_model_name(self, model: str) -> str:
        """
        Add a provider prefix when LiteLLM needs one.

        Bare gemini-* models get gemini/; everything with a known prefix or
        a pattern LiteLLM already routes is returned unchanged.
        """
        if not model:
            return model

        known_prefixes = ['bedrock/', 'gemini/', 'vertex_ai/', 'openai/', 'azure/',
                          'azure_ai/', 'anthropic/', 'claude-', 'gpt-', 'o1-', 'o3-']
        if any(model.startswith(prefix) for prefix in known_prefixes):
            return model

        if model.startswith('gemini-'):
            return f'gemini/{model}'

        return model

    def get_model_for_agent(self, agent_name: str) -> str:
        """
        Resolve the model for an agent: agent model, then group model, then default.

        Args:
            agent_name: Agent identifier (e.g., "character_evaluator")

        Returns:
            Normalized model name ready for LiteLLM
        """
        agent_cfg = self.config.get("agents", {}).get(agent_name) or {}
        if agent_cfg.get("model"):
            return self._normalize_model_name(agent_cfg["model"])

        for group_cfg in self.config.get("groups", {}).values():
            if agent_name in group_cfg.get("members", []) and group_cfg.get("model"):
                return self._normalize_model_name(group_cfg["model"])

        default_model = self.config.get("default", {}).get("model", "gpt-4o-mini")
        return self._normalize_model_name(default_model)

    def get_llm_kwargs(self, agent_name: str, model_override: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the keyword arguments for one LiteLLM call.

        Args:
            agent_name: Agent identifier
            model_override: Optional model to use instead of config

        Returns:
            Dict ready to splat into litellm.acompletion(**kwargs)
        """
        if model_override:
            model = self._normalize_model_name(model_override)
        else:
            model = self.get_model_for_agent(agent_name)

        agent_cfg = self.config.get("agents", {}).get(agent_name) or {}
        default_cfg = self.config.get("default", {})

        kwargs = {
            "model": model,
            "temperature": agent_cfg.get("temperature", default_cfg.get("temperature", 0.7)),
            "max_tokens": agent_cfg.get("max_tokens", default_cfg.get("max_tokens", 4096)),
            "timeout": agent_cfg.get("timeout", default_cfg.get("timeout", 300)),
            "drop_params": True,  # Auto-drop unsupported params
        }

        return self._apply_model_constraints(model, kwargs)

    def _apply_model_constraints(self, model: str, kwargs: dict) -> dict:
        """
        Handle provider-specific parameter constraints.

        - Claude: temperature and top_p are never sent together, so no top_p
        - OpenAI reasoning models (o1, o3, gpt-5): no sampling params,
          max_completion_tokens instead of max_tokens
        """
        model_lower = model.lower()

        is_claude = "claude" in model_lower or "anthropic" in model_lower
        if not is_claude:
            kwargs["top_p"] = 0.95

        is_openai_reasoning = any(x in model_lower for x in ["gpt-5", "o3-", "o1-"])
        if is_openai_reasoning:
            max_tokens = kwargs.pop("max_tokens", 16384)
            kwargs["max_completion_tokens"] = max_tokens
            kwargs.pop("temperature", None)
            kwargs.pop("top_p", None)

        return kwargs

    def get_agent_display_name(self, agent_name: str) -> str:
        return (self.config.get("agents", {}).get(agent_name) or {}).get("display_name", agent_name)

    def list_agents_in_group(self, group_name: str) -> List[str]:
        return self.config.get("groups", {}).get(group_name, {}).get("members", [])

    def list_all_agents(self) -> List[str]:
        return list(self.config.get("agents", {}).keys())

    def log_configuration(self):
        """Log the effective model for every configured agent."""
        logger.info("📋 LLM Router Configuration:")
        for agent_name in self.list_all_agents():
            model = self.get_model_for_agent(agent_name)
            display = self.get_agent_display_name(agent_name)
            logger.info(f"    • {display} ({agent_name}): {model}")


# Singleton instance
_llm_router: Optional[LLMRouter] = None


def get_llm_router() -> LLMRouter:
    """Get the shared LLM Router, creating it from the bundled config if needed."""
    global _llm_router
    if _llm_router is None:
        _llm_router = LLMRouter()
    return _llm_router


def init_llm_router(config_path: Optional[str] = None) -> LLMRouter:
    """Initialize the shared LLM Router (call at app startup)."""
    global _llm_router
    _llm_router = LLMRouter(config_path)
    return _llm_router


def reset_llm_router():
    """Reset the singleton (useful for testing)."""
    global _llm_router
    _llm_router = None
