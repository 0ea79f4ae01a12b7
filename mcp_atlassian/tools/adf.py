"""
Atlassian Document Format (ADF) normalisation.

Jira's v3 API only accepts rich-text fields as ADF documents. Tool callers
may send plain strings, nothing at all, or an already-built document; this
module folds those into a single accepted shape.
"""

from typing import Any, Dict

from mcp_atlassian.errors import DocumentError

ADF_DOC_TYPE = "doc"
ADF_VERSION = 1


def text_document(text: str) -> Dict[str, Any]:
    """Wrap ``text`` in a one-paragraph document."""
    return {
        "type": ADF_DOC_TYPE,
        "version": ADF_VERSION,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def _json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return repr(value)
    return _json_type_name(value)


def normalize_document(value: Any, field: str = "description") -> Any:
    """
    Coerce a tool argument into an ADF document.

    Strings and ``None`` become a fresh minimal document. A dict is checked
    for ``type == "doc"``, ``version == 1`` and a list ``content`` and is then
    returned untouched. Nested nodes are not inspected.
    """
    if isinstance(value, str):
        return text_document(value)
    if value is None:
        return text_document("")
    if isinstance(value, dict):
        _check_envelope(value, field)
        return value
    raise DocumentError(
        field,
        f"expected a string or an ADF document object, got {_json_type_name(value)}",
    )


def _check_envelope(doc: Dict[str, Any], field: str) -> None:
    if "type" not in doc:
        raise DocumentError(field, "missing required key 'type'")
    doc_type = doc["type"]
    if not isinstance(doc_type, str) or doc_type != ADF_DOC_TYPE:
        raise DocumentError(field, f'expected type "{ADF_DOC_TYPE}", got {_describe(doc_type)}')

    if "version" not in doc:
        raise DocumentError(field, "missing required key 'version'")
    version = doc["version"]
    if isinstance(version, bool) or not isinstance(version, (int, float)) or version != ADF_VERSION:
        raise DocumentError(field, f"expected version {ADF_VERSION}, got {_describe(version)}")

    if "content" not in doc:
        raise DocumentError(field, "missing required key 'content'")
    content = doc["content"]
    if not isinstance(content, list):
        raise DocumentError(field, f"expected content to be an array, got {_json_type_name(content)}")
