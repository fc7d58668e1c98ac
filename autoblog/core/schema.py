"""
Article contract.

JSON Schema for the drafted article payload (``article.json``) plus a helper
that turns validation errors into one readable line per violated path.
"""
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

SOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["title", "url"],
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "url": {"type": "string", "pattern": "^https?://[^\\s/]+"},
        "published_at": {"type": ["string", "null"]},
    },
    "additionalProperties": True,
}

ARTICLE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": [
        "title",
        "summary",
        "slug",
        "date",
        "tags",
        "category",
        "canonical_url",
        "sources",
        "content_markdown",
    ],
    "properties": {
        "title": {"type": "string", "minLength": 8, "maxLength": 160},
        "summary": {"type": "string", "minLength": 20},
        "slug": {"type": "string", "pattern": "^[\\w]+(?:-[\\w]+)*$"},
        "date": {"type": "string", "pattern": "^\\d{4}-\\d{2}-\\d{2}$"},
        "tags": {
            "type": "array",
            "minItems": 1,
            "maxItems": 6,
            "items": {"type": "string", "minLength": 1},
        },
        "category": {"type": "string", "minLength": 1},
        "canonical_url": {"type": "string", "pattern": "^https?://"},
        "sources": {"type": "array", "items": SOURCE_SCHEMA},
        "content_markdown": {"type": "string", "minLength": 1},
    },
    "additionalProperties": True,
}


_VALIDATOR = Draft202012Validator(ARTICLE_SCHEMA)


def validate_article_payload(payload: Dict[str, Any]) -> List[str]:
    """Return one human-readable error per violated path (empty means valid)."""
    errors = []
    seen = set()
    for e in sorted(_VALIDATOR.iter_errors(payload), key=lambda x: [str(p) for p in x.path]):
        path = "/" + "/".join(str(p) for p in e.path) if e.path else "/"
        # Missing properties all report the parent path; keep each one
        key = e.message if e.validator == "required" else path
        if key in seen:
            continue
        seen.add(key)
        errors.append(f"Schema violation at {path}: {e.message}")
    return errors
