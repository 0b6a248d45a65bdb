"""JSON Schema validation for encoded deps documents.

The bundled schema describes the deps.json layout the writer produces.
Documents are checked against it before anything is written to disk.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator, ValidationError
from jsonschema.exceptions import best_match

# src/deps_file_generator/core/validator.py -> src/deps_file_generator/schemas/
SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "deps.schema.json"


@lru_cache(maxsize=1)
def get_validator() -> Draft7Validator:
    """Load the deps.json schema and build a validator for it.

    Raises:
        OSError: If the bundled schema can't be read
        json.JSONDecodeError: If the bundled schema is not valid JSON
    """
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def validate_deps_document(document: dict[str, Any]) -> None:
    """Validate an encoded deps document.

    Raises:
        ValidationError: The most relevant violation, if there is any
    """
    error = best_match(get_validator().iter_errors(document))
    if error is not None:
        raise error


def _format_location(error: ValidationError) -> str:
    # Library keys contain '/', so path segments are quoted
    if not error.absolute_path:
        return "document root"
    return "".join(f"[{segment!r}]" for segment in error.absolute_path)


def validate_deps_document_with_error_details(document: dict[str, Any]) -> tuple[bool, str | None]:
    """Validate a deps document and describe the first problem found.

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_deps_document(document)
    except ValidationError as e:
        return False, f"Validation error at {_format_location(e)}: {e.message}"
    except (OSError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
    return True, None
