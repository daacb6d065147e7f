"""
Host-side extraction over a page's serialized DOM.

The page HTML is fetched once from the remote browser and parsed with
BeautifulSoup; all scanning happens locally.
"""

import json
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    NavigableString,
    RubyParenthesisString,
    RubyTextString,
    Script,
    Stylesheet,
    TemplateString,
)

# String types a browser counts towards textContent. Comments are excluded.
TEXT_CONTENT_TYPES = (
    NavigableString,
    CData,
    Script,
    Stylesheet,
    TemplateString,
    RubyTextString,
    RubyParenthesisString,
)


def text_content(el) -> str:
    """Concatenated text of ``el`` including inline script and style bodies."""
    return el.get_text(types=TEXT_CONTENT_TYPES)


def extract_json_objects(text: str) -> List[Any]:
    """
    Find every balanced ``{...}`` substring in ``text`` that parses as JSON.

    Nesting is tracked by brace depth only; a candidate is tried each time the
    depth returns to zero. Candidates that fail to parse are skipped. A closing
    brace with no open brace is ignored.
    """
    found = []
    depth = 0
    start = -1
    for i, ch in enumerate(text or ""):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0 and start != -1:
                try:
                    found.append(json.loads(text[start:i + 1]))
                except ValueError:
                    pass
                start = -1
    return found


def _parse_whole(text: str) -> List[Any]:
    try:
        return [json.loads(text or "")]
    except ValueError:
        return []


def extract_structured_data(html: str, selector: Optional[str] = None) -> Dict[str, List[Any]]:
    """
    Collect JSON values embedded in a page.

    Args:
        html: Serialized document.
        selector: Optional CSS selector limiting the text-content scan. The
            script, meta and JSON-LD scans always cover the whole document.

    Returns:
        dict with keys ``textContent``, ``scriptTags``, ``metaTags`` and ``jsonLd``.
    """
    soup = BeautifulSoup(html or "", "html.parser")

    if selector:
        elements = soup.select(selector)
    else:
        elements = [soup.body or soup]

    text_values: List[Any] = []
    for el in elements:
        text_values.extend(extract_json_objects(text_content(el)))

    script_tags: List[Any] = []
    for script in soup.find_all("script"):
        body = script.get_text()
        if (script.get("type") or "").lower() == "application/json":
            script_tags.extend(_parse_whole(body))
        else:
            script_tags.extend(extract_json_objects(body))

    meta_tags: List[Any] = []
    for meta in soup.find_all("meta"):
        meta_tags.extend(extract_json_objects(meta.get("content") or ""))

    json_ld: List[Any] = []
    for script in soup.select('script[type="application/ld+json"]'):
        json_ld.extend(_parse_whole(script.get_text()))

    return {
        "textContent": text_values,
        "scriptTags": script_tags,
        "metaTags": meta_tags,
        "jsonLd": json_ld,
    }


def extract_text_content(html: str, selector: Optional[str] = None) -> List[str]:
    """
    Text content of every element matching ``selector`` (every element when
    omitted), in document order. Nesting is not preserved.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    elements = soup.select(selector) if selector else soup.find_all(True)
    return [text_content(el) for el in elements]


__all__ = [
    "extract_json_objects",
    "extract_structured_data",
    "extract_text_content",
    "text_content",
    "TEXT_CONTENT_TYPES",
]
