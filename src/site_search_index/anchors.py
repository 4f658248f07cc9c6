"""URL-fragment-safe anchor id generation."""

import re
from dataclasses import dataclass

FALLBACK_ANCHOR = "section"

_TAG_RE = re.compile(r"<[^>]+>")
_UNSAFE_RE = re.compile(r"[^\w\s-]")
_SPACING_RE = re.compile(r"[\s_]+")
_DIGIT_RE = re.compile(r"\d")


@dataclass
class AnchorOptions:
    """Policy applied when turning text into an anchor id."""

    max_length: int = 50
    allow_numbers: bool = True
    separator: str = "-"
    prefix: str = ""
    suffix: str = ""


def _tidy_separators(anchor: str, separator: str) -> str:
    """Collapse repeated separators and trim them from both ends.

    Args:
        anchor: Partially built anchor.
        separator: Configured separator, possibly empty.

    Returns:
        The tidied anchor.
    """
    if not separator:
        return anchor
    escaped = re.escape(separator)
    anchor = re.sub(f"(?:{escaped})+", separator, anchor)
    return re.sub(f"^(?:{escaped})+|(?:{escaped})+$", "", anchor)


def generate_anchor_id(text: object, options: AnchorOptions | None = None) -> str:
    """Generate an anchor id from heading or section text.

    The text is lowercased, stripped of markup and punctuation, joined with
    the configured separator and truncated. Non-string or empty input, and
    text that cleans down to nothing, yield ``"section"``.

    Args:
        text: Text to convert.
        options: Anchor policy, defaults to ``AnchorOptions()``.

    Returns:
        A non-empty anchor id.
    """
    if not isinstance(text, str) or not text:
        return FALLBACK_ANCHOR

    opts = options or AnchorOptions()
    separator = opts.separator

    anchor = _TAG_RE.sub("", text.lower())
    anchor = _UNSAFE_RE.sub("", anchor)
    anchor = _SPACING_RE.sub(separator, anchor)
    anchor = _tidy_separators(anchor, separator)

    if not opts.allow_numbers:
        anchor = _tidy_separators(_DIGIT_RE.sub("", anchor), separator)

    if len(anchor) > opts.max_length:
        anchor = anchor[: opts.max_length]
        if separator:
            anchor = re.sub(f"(?:{re.escape(separator)})+$", "", anchor)

    if opts.prefix:
        anchor = f"{opts.prefix}{separator}{anchor}" if anchor else opts.prefix
    if opts.suffix:
        anchor = f"{anchor}{separator}{opts.suffix}" if anchor else opts.suffix

    return anchor.strip() or FALLBACK_ANCHOR
