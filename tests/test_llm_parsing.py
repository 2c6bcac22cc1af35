"""Tests for LLM output cleanup and JSON parsing."""

import json

import pytest

from app.core.llm import _strip_llm_fences, parse_llm_json


def test_strips_json_fence():
    assert _strip_llm_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_strips_bare_fence():
    assert _strip_llm_fences("```\n[1, 2]\n```") == "[1, 2]"


def test_plain_text_untouched():
    assert _strip_llm_fences('  {"a": 1}  ') == '{"a": 1}'


def test_parses_array():
    assert parse_llm_json('[{"title": "Open the facility"}]') == [{"title": "Open the facility"}]


def test_fenced_text_with_preamble():
    raw = 'Here you go:\n```json\n{"summary": "ok"}\n```\nThanks'
    assert parse_llm_json(raw) == {"summary": "ok"}


def test_invalid_json_raises():
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json("not json at all")
