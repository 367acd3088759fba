from __future__ import annotations

from newsfuse.models.completion import Failed, PlainText, StructuredJson, extract_json_fragment, parse_completion


def test_empty_or_missing_response_is_failed():
    assert parse_completion(None) == Failed("empty_response")
    assert parse_completion("   \n") == Failed("empty_response")


def test_embedded_object_is_structured():
    parsed = parse_completion('Sure! Here you go: {"category": "sports"} Hope that helps.')
    assert isinstance(parsed, StructuredJson)
    assert parsed.value == {"category": "sports"}


def test_embedded_array_is_structured():
    parsed = parse_completion('Answer:\n["https://a.com/1", "https://b.com/2"]')
    assert isinstance(parsed, StructuredJson)
    assert parsed.value == ["https://a.com/1", "https://b.com/2"]


def test_brackets_inside_strings_do_not_break_matching():
    value = extract_json_fragment('{"points": ["a } tricky [point]", "b"]} trailing }')
    assert value == {"points": ["a } tricky [point]", "b"]}


def test_invalid_fragment_skipped_for_later_valid_one():
    value = extract_json_fragment("[see note] then {\"ok\": true}")
    assert value == {"ok": True}


def test_text_without_json_is_plain():
    parsed = parse_completion("technology")
    assert parsed == PlainText("technology")
