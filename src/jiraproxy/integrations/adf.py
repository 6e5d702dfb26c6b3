# ADF: plain-text rendering of Atlassian Document Format bodies.
# Created: 2026-10-14
#
# Jira v3 returns descriptions and comment bodies as ADF trees. The board only
# shows plain text, so we flatten them here.

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def _render(node: Any) -> str:
    if not isinstance(node, dict):
        return ""

    node_type = node.get("type")
    content = node.get("content")

    if node_type == "text":
        return node.get("text", "")
    if node_type == "hardBreak":
        return "\n"

    children = content if isinstance(content, list) else []
    inner = "".join(_render(child) for child in children)

    if node_type in ("paragraph", "heading"):
        return inner + "\n\n"
    if node_type in ("bulletList", "orderedList"):
        return "\n".join("• " + _render(item).strip() for item in children) + "\n\n"
    if node_type == "codeBlock":
        return f"```\n{inner}\n```\n\n"
    if node_type == "blockquote":
        return f"> {inner}\n\n"
    return inner


def adf_to_text(adf: Any) -> str:
    """Flatten an ADF document (or bare content list) into plain text.

    Plain strings pass through unchanged, and ``None`` yields ``""``.
    """
    if not adf:
        return ""
    if isinstance(adf, str):
        return adf

    try:
        if isinstance(adf, list):
            return "".join(_render(node) for node in adf).strip()
        if isinstance(adf, dict) and isinstance(adf.get("content"), list):
            return "".join(_render(node) for node in adf["content"]).strip()
    except Exception:
        logger.warning("Failed to render ADF content", exc_info=True)
        return "Unable to parse description"
    return ""


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in an ADF document, one paragraph per line.

    Blank lines become empty paragraphs.
    """
    paragraphs = []
    for line in text.split("\n"):
        paragraph: dict[str, Any] = {"type": "paragraph", "content": []}
        if line:
            paragraph["content"].append({"type": "text", "text": line})
        paragraphs.append(paragraph)
    return {"type": "doc", "version": 1, "content": paragraphs}
