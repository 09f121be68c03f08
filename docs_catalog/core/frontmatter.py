"""Front-matter parsing and title extraction for Markdown documents."""

import re
from typing import NamedTuple

FRONT_MATTER_DELIMITER = "---"

# A level-1 heading; "## ..." and deeper are not titles
HEADING_PATTERN = re.compile(r"^#(?!#)[ \t]*(\S.*)$", re.MULTILINE)

QUOTE_CHARS = "\"'"


class FrontMatter(NamedTuple):
    """Title and tags found in a document's leading metadata block."""

    title: str | None = None
    tags: tuple[str, ...] = ()


def _strip_quotes(value: str) -> str:
    return value.strip().strip(QUOTE_CHARS).strip()


def _parse_inline_list(value: str) -> list[str]:
    """Parse ``[a, "b", c]`` into its non-empty items."""
    inner = value.strip().strip("[]")
    items = (_strip_quotes(item) for item in inner.split(","))
    return [item for item in items if item]


def _field_value(line: str) -> str:
    return line[line.index(":") + 1 :].strip()


def parse_front_matter(text: str | None) -> FrontMatter:
    """Extract the title and tags from a ``---`` delimited metadata block.

    The block must start at the very beginning of the text and be closed by a
    ``---`` line. Anything malformed degrades to an empty result.

    Supported fields:
        title: "Some title"
        tags: [alpha, beta]
        tags:
          - alpha
          - beta

    Lines are scanned once, top to bottom. While collecting a bulleted tag
    list, the first line that is not a ``- `` bullet ends the list and is
    skipped.
    """
    if not text or not text.startswith(FRONT_MATTER_DELIMITER):
        return FrontMatter()

    end = text.find("\n" + FRONT_MATTER_DELIMITER)
    if end < 0:
        return FrontMatter()

    block = text[len(FRONT_MATTER_DELIMITER) : end]

    title = None
    tags: list[str] = []
    in_tag_list = False

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if in_tag_list:
            if line.startswith("- "):
                tag = _strip_quotes(line[2:])
                if tag:
                    tags.append(tag)
                continue
            in_tag_list = False
            continue

        lowered = line.lower()
        if lowered.startswith("title:"):
            title = _strip_quotes(_field_value(line))
        elif lowered.startswith("tags:"):
            rest = _field_value(line)
            if rest.startswith("["):
                tags.extend(_parse_inline_list(rest))
            else:
                in_tag_list = True

    return FrontMatter(title=title or None, tags=tuple(tags))


def extract_heading_title(text: str | None) -> str | None:
    """Return the text of the first level-1 Markdown heading, if any."""
    if not text:
        return None
    match = HEADING_PATTERN.search(text)
    if not match:
        return None
    title = match.group(1).strip()
    return title or None
