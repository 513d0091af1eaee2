"""tests for reasoning trace conversion."""

from chatrender.transforms.think import transform_think_blocks


def test_closed_block_becomes_blockquote() -> None:
    """quotes each trimmed line of a closed block."""
    text = "<think>\n step one \nstep two\n</think>\nAnswer"
    assert transform_think_blocks(text) == "> step one\n> step two\nAnswer"


def test_unterminated_block_consumes_rest() -> None:
    """quotes everything after an unclosed tag."""
    assert transform_think_blocks("<think>line1\nline2") == "> line1\n> line2"


def test_unterminated_lines_trimmed() -> None:
    """trims every line independently."""
    assert transform_think_blocks("<think>  line1  \n  line2  ") == "> line1\n> line2"


def test_closed_then_open_block() -> None:
    """handles a closed block followed by an unterminated one once each."""
    text = "<think>a</think>\nok\n<think>b"
    assert transform_think_blocks(text) == "> a\nok\n> b"


def test_text_without_tags_unchanged() -> None:
    """leaves text without think tags alone."""
    assert transform_think_blocks("just text") == "just text"
