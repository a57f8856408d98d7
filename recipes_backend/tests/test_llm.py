import json
from unittest.mock import MagicMock, patch

import pytest

from recipes_backend.llm.config import LLMConfig
from recipes_backend.llm.groq_client import (
    SubstitutionError,
    SubstitutionUnavailable,
    parse_substitution_response,
    suggest_substitutions,
)
from recipes_backend.recommendations.models import Recipe

RECIPE = Recipe(
    id="r1",
    title="Pancakes",
    ingredients=["2 eggs", "1 cup milk", "1 cup flour"],
)

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)
NO_KEY_CONFIG = LLMConfig(api_key="", enabled=True)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("recipes_backend.llm.groq_client.Groq")
def test_suggest_substitutions_returns_parsed_result(mock_groq_cls):
    llm_response = json.dumps({
        "substitutions": [
            {"raw": "1 cup almond milk", "normalized": "almond milk"},
            {"raw": "1 cup oat milk", "normalized": "oat milk"},
            {"raw": "1 cup soy milk", "normalized": "soy milk"},
        ],
        "explanation": "Plant milks keep the batter moist.",
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = suggest_substitutions(RECIPE, "1 cup milk", "dairy free", config=ENABLED_CONFIG)

    assert [s.normalized for s in result.substitutions] == ["almond milk", "oat milk", "soy milk"]
    assert result.explanation == "Plant milks keep the batter moist."

    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    user_message = kwargs["messages"][1]["content"]
    assert 'Recipe: "Pancakes"' in user_message
    assert 'Substitute this ingredient: "1 cup milk"' in user_message
    assert 'User preference: "dairy free"' in user_message


@patch("recipes_backend.llm.groq_client.Groq")
def test_api_error_raises_substitution_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    with pytest.raises(SubstitutionError, match="Failed to get substitutions"):
        suggest_substitutions(RECIPE, "1 cup milk", "dairy free", config=ENABLED_CONFIG)


@patch("recipes_backend.llm.groq_client.Groq")
def test_bad_json_raises_substitution_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    with pytest.raises(SubstitutionError, match="Invalid substitution response"):
        suggest_substitutions(RECIPE, "1 cup milk", "dairy free", config=ENABLED_CONFIG)


@patch("recipes_backend.llm.groq_client.Groq")
def test_disabled_never_calls_groq(mock_groq_cls):
    with pytest.raises(SubstitutionUnavailable):
        suggest_substitutions(RECIPE, "1 cup milk", "dairy free", config=DISABLED_CONFIG)
    with pytest.raises(SubstitutionUnavailable):
        suggest_substitutions(RECIPE, "1 cup milk", "dairy free", config=NO_KEY_CONFIG)
    mock_groq_cls.assert_not_called()


def test_parse_takes_last_json_object():
    reply = (
        'Thinking about {"draft": true} first. '
        '{"substitutions": [{"raw": "2 tbsp oil", "normalized": "oil"}], "explanation": "ok"}'
    )
    result = parse_substitution_response(reply)
    assert result.substitutions[0].raw == "2 tbsp oil"


def test_parse_accepts_plain_string_items():
    result = parse_substitution_response(
        json.dumps({"substitutions": ["Almond Milk "], "explanation": "ok"})
    )
    assert result.substitutions[0].normalized == "almond milk"


@pytest.mark.parametrize(
    "reply",
    [
        None,
        "",
        json.dumps({"substitutions": [], "explanation": "none"}),
        json.dumps({"substitutions": [{"raw": "oil"}], "explanation": "missing normalized"}),
        json.dumps({"substitutions": [{"raw": "oil", "normalized": "oil"}]}),
    ],
)
def test_parse_rejects_unusable_replies(reply):
    assert parse_substitution_response(reply) is None
