"""
Validation Service for LLM Output Processing

Turns raw model text into a validated Pydantic object. Handles the usual
formatting noise around JSON:
- Markdown code blocks (```json ... ```)
- Preamble text before the JSON object
- Trailing commas before } or ]
- Invalid control characters

Only syntax is repaired here. Field values are never invented or
defaulted: anything the schema rejects raises SchemaValidationError.
"""

import json
import re
import logging
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from episode_studio.services.errors import SchemaValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def clean_json_output(output: str) -> str:
    """
    Clean markdown code blocks and preamble from LLM output.

    Args:
        output: Raw LLM output possibly containing markdown

    Returns:
        Cleaned JSON string ready for parsing
    """
    result_str = output.strip()

    # Keep \t, \n, \r; drop the other control characters
    result_str = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', '', result_str)

    # Already valid JSON: fences inside string values must not be touched
    try:
        json.loads(result_str, strict=False)
        return result_str
    except json.JSONDecodeError:
        pass

    fenced = re.search(r'```(?:json)?\s*(\{[\s\S]*\})\s*```', result_str)
    if fenced:
        result_str = fenced.group(1).strip()
    else:
        extracted = _extract_json_object(result_str)
        if extracted:
            result_str = extracted

    try:
        json.loads(result_str, strict=False)
        return result_str
    except json.JSONDecodeError:
        pass

    # Trailing commas before } or ]
    return re.sub(r',(\s*[}\]])', r'\1', result_str)


def _extract_json_object(text: str) -> Optional[str]:
    """
    Extract the first balanced JSON object from text.

    Handles preamble such as "Here is the JSON:\\n{...}". Braces inside
    string literals are ignored.

    Returns:
        The extracted JSON string, or None if no balanced object exists
    """
    start_idx = text.find('{')
    if start_idx == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False

    for i in range(start_idx, len(text)):
        char = text[i]

        if escape_next:
            escape_next = False
            continue
        if char == '\\' and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]

    return None


def parse_structured_output(raw_output: str, output_model: Type[ModelT]) -> ModelT:
    """
    Parse and validate raw model output against a Pydantic model.

    Args:
        raw_output: Text returned by the generation backend
        output_model: Model the output must satisfy

    Returns:
        Validated model instance

    Raises:
        SchemaValidationError: if the text is not JSON or fails validation
    """
    schema_name = output_model.__name__

    if not raw_output or not raw_output.strip():
        raise SchemaValidationError(schema_name, "empty response", raw_output)

    cleaned = clean_json_output(raw_output)
    try:
        data = json.loads(cleaned, strict=False)
    except json.JSONDecodeError as e:
        logger.warning(f"⚠️ {schema_name}: response is not valid JSON ({e})")
        raise SchemaValidationError(schema_name, f"invalid JSON: {e}", raw_output) from e

    try:
        return output_model.model_validate(data)
    except ValidationError as e:
        logger.warning(f"⚠️ {schema_name}: {e.error_count()} schema error(s)")
        raise SchemaValidationError(schema_name, str(e), raw_output) from e
