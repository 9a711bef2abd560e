"""Services package for Episode Studio"""

from .errors import (
    EpisodeStudioError,
    InputValidationError,
    SchemaValidationError,
    ContractViolationError,
    ExternalDependencyError,
    MISSING_RECIPIENT_CHANNEL,
)
from .llm_router import LLMRouter, get_llm_router, init_llm_router, reset_llm_router
from .validation_service import clean_json_output, parse_structured_output
from .generation import GenerationBackend, GenerationAdapter, LiteLLMBackend
from .revision_service import RevisionDecision, decide, partition_by_band, compile_revision_feedback
