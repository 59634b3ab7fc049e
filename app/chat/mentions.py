"""@mention tokenization shared by the relay and the client session."""

import re
from typing import List


# ASCII word characters only: letters, digits, underscore
MENTION_PATTERN = re.compile(r"@(\w+)", re.ASCII)

DEFAULT_HIGHLIGHT_TEMPLATE = '<span class="mention">@{name}</span>'


def extract_mentions(content: str) -> List[str]:
    """Return every mention in ``content``, left to right, without the ``@``.

    Repeated mentions are kept once per occurrence.
    """
    return MENTION_PATTERN.findall(content)


def highlight_mentions(content: str, template: str = DEFAULT_HIGHLIGHT_TEMPLATE) -> str:
    """Wrap each mention in ``content`` for display.

    ``template`` is formatted with ``name`` set to the mention token. The
    surrounding text is returned untouched; escaping it is the renderer's job.
    """
    return MENTION_PATTERN.sub(lambda match: template.format(name=match.group(1)), content)
