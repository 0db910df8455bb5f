"""Sanitizer for rich location content authored in the Quill editor."""

from __future__ import annotations

from typing import Optional

import bleach
from bleach.css_sanitizer import CSSSanitizer
from bleach.linkifier import DEFAULT_CALLBACKS
from markupsafe import Markup

# Mirrors the editor toolbar: headers, fonts, lists, bold/italic/underline,
# colours, alignment, links.
ALLOWED_CONTENT_TAGS = {
    "a",
    "b",
    "blockquote",
    "br",
    "code",
    "em",
    "h1",
    "h2",
    "i",
    "li",
    "ol",
    "p",
    "s",
    "span",
    "strong",
    "u",
    "ul",
}
ALLOWED_CONTENT_ATTRS = {
    "a": ["href", "title", "target", "rel"],
    "*": ["class", "style"],
}
ALLOWED_CSS_PROPERTIES = ["color", "background-color", "text-align"]
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

CSS_SANITIZER = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES)


def _link_target_blank(attrs, new=False):
    href = attrs.get((None, "href"))
    if not href:
        return attrs

    attrs[(None, "target")] = "_blank"
    rel_values = set(filter(None, (attrs.get((None, "rel")) or "").split()))
    rel_values.update({"noopener", "noreferrer"})
    attrs[(None, "rel")] = " ".join(sorted(rel_values))
    return attrs


LINKIFY_CALLBACKS = list(DEFAULT_CALLBACKS) + [_link_target_blank]


def sanitize_location_content(html: Optional[str]) -> str:
    """Strip scripts, event handlers and unknown markup from location content."""
    if not html:
        return ""
    cleaned = bleach.clean(
        html,
        tags=ALLOWED_CONTENT_TAGS,
        attributes=ALLOWED_CONTENT_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        css_sanitizer=CSS_SANITIZER,
        strip=True,
    )
    return bleach.linkify(cleaned, callbacks=LINKIFY_CALLBACKS, skip_tags=["code"])


def trusted_html(value: Optional[str]) -> Markup:
    """Template filter: render stored location content unescaped."""
    if not value:
        return Markup("")
    return Markup(value)
