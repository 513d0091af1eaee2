"""reasoning trace (<think>) to blockquote conversion."""

import re

CLOSED_THINK_PATTERN = re.compile(r"<think>([\s\S]*?)</think>")
# closed pairs are gone by the time this runs, so any <think> left is open
OPEN_THINK_PATTERN = re.compile(r"<think>\n?([\s\S]*?)(?=</think>|\Z)")


def _as_blockquote(content: str) -> str:
    return "\n".join(f"> {line.strip()}" for line in content.strip().split("\n"))


def transform_think_blocks(text: str) -> str:
    """
    converts <think> reasoning traces into blockquote lines.

    Closed tag pairs are converted first; an opening tag without a closing
    tag then takes the rest of the text as its content.

    Args:
        text: message text

    Returns:
        text with reasoning traces quoted
    """
    text = CLOSED_THINK_PATTERN.sub(lambda m: _as_blockquote(m.group(1)), text)
    return OPEN_THINK_PATTERN.sub(lambda m: _as_blockquote(m.group(1)), text)
