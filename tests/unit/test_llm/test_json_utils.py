"""Unit tests for LLM JSON recovery helpers."""

from job_taxonomy.features.llm.json_utils import (
    decode_llm_json,
    extract_first_json_block,
    fix_escape_sequences,
    json_candidates,
    strip_markdown_fences,
)


class TestStripMarkdownFences:
    """Tests for strip_markdown_fences."""

    def test_strips_json_fence(self) -> None:
        """Should remove a fenced code block wrapper."""
        text = '```json\n{"a": 1}\n```'
        assert strip_markdown_fences(text) == '{"a": 1}'

    def test_leaves_plain_text(self) -> None:
        """Should only trim whitespace from unfenced text."""
        assert strip_markdown_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_fence_without_language_tag(self) -> None:
        """Should unwrap a bare fence."""
        assert strip_markdown_fences('```\n["x"]\n```') == '["x"]'

    def test_unterminated_fence_left_for_extraction(self) -> None:
        """Should not guess at a fence that never closes."""
        text = '```json\n{"a": 1}'
        assert strip_markdown_fences(text) == text
        assert decode_llm_json(text) == (True, {"a": 1})


class TestExtractFirstJsonBlock:
    """Tests for extract_first_json_block."""

    def test_extracts_object_followed_by_prose(self) -> None:
        """Should cut trailing prose after a balanced object."""
        text = 'Here you go: {"a": {"b": 2}} hope that helps'
        assert extract_first_json_block(text) == '{"a": {"b": 2}}'

    def test_extracts_array(self) -> None:
        """Should handle arrays as well as objects."""
        assert extract_first_json_block('x ["a", "b"] y') == '["a", "b"]'

    def test_ignores_brackets_inside_strings(self) -> None:
        """Should not count braces that appear inside JSON strings."""
        text = '{"name": "curly } brace"} trailing'
        assert extract_first_json_block(text) == '{"name": "curly } brace"}'

    def test_returns_none_without_brackets(self) -> None:
        """Should return None when there is nothing to extract."""
        assert extract_first_json_block("no json here") is None

    def test_returns_none_when_unbalanced(self) -> None:
        """Should return None for an unterminated block."""
        assert extract_first_json_block('{"a": 1') is None


class TestJsonCandidates:
    """Tests for json_candidates."""

    def test_full_text_first(self) -> None:
        """Should try the full text before the extracted block."""
        text = 'prefix {"a": 1}'
        assert json_candidates(text) == [text, '{"a": 1}']

    def test_no_duplicate_when_text_is_block(self) -> None:
        """Should not repeat the text when it is already the block."""
        assert json_candidates('{"a": 1}') == ['{"a": 1}']


class TestDecodeLlmJson:
    """Tests for decode_llm_json."""

    def test_decodes_fenced_object_with_prose(self) -> None:
        """Should apply all fallbacks."""
        decoded, value = decode_llm_json('```json\n{"a": 3}\n```')
        assert decoded
        assert value == {"a": 3}

    def test_fixes_invalid_escapes(self) -> None:
        """Should repair lone backslashes."""
        decoded, value = decode_llm_json('{"path": "C:\\_data"}')
        assert decoded
        assert value == {"path": "C:\\_data"}

    def test_reports_failure(self) -> None:
        """Should return (False, None) for undecodable text."""
        assert decode_llm_json("not json at all") == (False, None)


class TestFixEscapeSequences:
    """Tests for fix_escape_sequences."""

    def test_keeps_valid_escapes(self) -> None:
        """Should leave valid JSON escapes alone."""
        assert fix_escape_sequences('"a\\nb"') == '"a\\nb"'
