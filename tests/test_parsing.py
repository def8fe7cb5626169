"""Tests for JSON extraction from model replies."""

import pytest

from precedent_explorer.inference.parsing import extract_json


class TestExtractJson:
    """Test suite for extract_json."""

    @pytest.mark.unit
    def test_plain_object(self):
        assert extract_json('{"domain": "Finance"}') == {"domain": "Finance"}

    @pytest.mark.unit
    def test_fenced_block(self):
        content = 'Here is the profile:\n```json\n{"domain": "Family"}\n```\nLet me know.'
        assert extract_json(content) == {"domain": "Family"}

    @pytest.mark.unit
    def test_array_surrounded_by_prose(self):
        content = 'Matches: [{"id": "PREC-001"}, {"id": "PREC-002"}] - end of list'
        assert extract_json(content) == [{"id": "PREC-001"}, {"id": "PREC-002"}]

    @pytest.mark.unit
    def test_object_containing_array(self):
        content = 'Result {"matches": [{"id": "A"}]} done'
        assert extract_json(content) == {"matches": [{"id": "A"}]}

    @pytest.mark.unit
    def test_repairs_trailing_commas(self):
        content = '```json\n{"legalAttributes": ["a", "b",],}\n```'
        assert extract_json(content) == {"legalAttributes": ["a", "b"]}

    @pytest.mark.unit
    def test_repairs_line_comments(self):
        content = '{\n  // model chatter\n  "consensusLevel": "Ijma"\n}'
        assert extract_json(content) == {"consensusLevel": "Ijma"}

    @pytest.mark.unit
    def test_keeps_urls_in_strings(self):
        content = '{"source": "https://example.org/fatwa",}'
        assert extract_json(content) == {"source": "https://example.org/fatwa"}

    @pytest.mark.unit
    @pytest.mark.parametrize("content", ["", "   ", "No structured answer available.", "42"])
    def test_returns_none_without_json(self, content):
        assert extract_json(content) is None
