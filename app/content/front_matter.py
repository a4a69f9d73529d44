# app/content/front_matter.py
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import yaml

from app.errors import ValidationFailed

_DELIM = "---"


@dataclass
class ChapterSource:
    """One chapter file as pulled from the content repo."""

    path: str
    body: str
    attributes: Dict[str, Any] = field(default_factory=dict)


def parse(text: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a leading YAML block delimited by '---' lines from the Markdown body.
    Text without such a block yields ({}, text).
    """
    text = (text or "").lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIM:
        return {}, text

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _DELIM:
            raw = "".join(lines[1:i])
            body = "".join(lines[i + 1:])
            break
    else:
        return {}, text

    try:
        attributes = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ValidationFailed(f"Invalid front matter: {e}") from e
    if not isinstance(attributes, dict):
        raise ValidationFailed("Front matter must be a mapping")
    return attributes, body.lstrip("\n")


def parse_chapter_file(path: str, text: str) -> ChapterSource:
    attributes, body = parse(text)
    return ChapterSource(path=path, body=body, attributes=attributes)
