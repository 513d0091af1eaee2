"""spacing fixes around **bold** markers."""

import re

MAX_ROUNDS = 10

# ordered passes; "@@..@@#" and "#%..%#@" are sentinels marking runs that are
# already fixed so later passes do not re-match them
BOLD_PASSES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r":\s\*\*"), ":**"),
    (re.compile(r"\*\*([^*]+?)\*\*[^\S\n]+"), r"@@\1@@#"),
    (re.compile(r"\*\*(?=.*[^\S\n].*\*\*)([^*]+?)\*\*(?!\s)"), r"#%\1%#@"),
    (re.compile(r"\*\*(?=.*：.*\*\*)([^*]+?)\*\*(?!\s)"), r"**\1** "),
    (re.compile(r"@@(.+?)@@#"), r"**\1** "),
    (re.compile(r"#%(.+?)%#@"), r"**\1** "),
    # not after a colon or a space, nor before punctuation the passes below
    # pull back against the run
    (re.compile(r"(?<!:)(?<! ) *\*\*([^\s]+?)\*\*(?![\s,.，。：])"), r" **\1** "),
    (re.compile(r"(\*\*.+?\*\*)\s："), r"\1："),
    (re.compile(r"(\*\*.+?\*\*)\s，"), r"\1，"),
    (re.compile(r"(\*\*.+?\*\*)\s,"), r"\1,"),
    (re.compile(r"(\*\*.+?\*\*)\s\."), r"\1."),
    (re.compile(r"(\*\*.+?\*\*)\s。"), r"\1。"),
)


def _apply_passes(text: str) -> str:
    for pattern, replacement in BOLD_PASSES:
        text = pattern.sub(replacement, text)
    return text


def fix_bold_formatting(text: str) -> str:
    """
    fixes spacing around bold markers next to colons, punctuation and text.

    The passes are repeated until the text stops changing, so fixing an
    already fixed text is a no-op.

    Args:
        text: text with code, links and math already protected

    Returns:
        text with bold spacing corrected
    """
    for _ in range(MAX_ROUNDS):
        fixed = _apply_passes(text)
        if fixed == text:
            break
        text = fixed
    return text
