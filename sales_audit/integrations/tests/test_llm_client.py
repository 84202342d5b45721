import json
from http.client import IncompleteRead
from http.client import RemoteDisconnected
from unittest import mock

import pytest

from sales_audit.integrations.llm.client import GeminiClient
from sales_audit.integrations.llm.client import LLMConfig
from sales_audit.integrations.llm.client import get_llm_client_from_settings
from sales_audit.integrations.llm.prompts import NARRATIVE_SECTIONS
from sales_audit.integrations.llm.prompts import build_audit_narrative_prompt


def test_client_disabled_by_setting(settings):
    settings.AUDIT_NARRATIVE_LLM_ENABLED = False
    assert get_llm_client_from_settings() is None


def test_client_requires_api_key(settings):
    settings.AUDIT_NARRATIVE_LLM_ENABLED = True
    settings.LLM_PROVIDER = "gemini"
    settings.GEMINI_API_KEY = None
    assert get_llm_client_from_settings() is None

    settings.GEMINI_API_KEY = "k"
    assert isinstance(get_llm_client_from_settings(), GeminiClient)


def test_unknown_provider(settings):
    settings.AUDIT_NARRATIVE_LLM_ENABLED = True
    settings.LLM_PROVIDER = "other"
    assert get_llm_client_from_settings() is None


def test_extract_reads_first_candidate():
    body = {"candidates": [{"content": {"parts": [{"text": json.dumps({"coaching": "x"})}]}}]}
    assert GeminiClient._extract(body) == {"coaching": "x"}  # noqa: SLF001
    assert GeminiClient._extract({"candidates": []}) is None  # noqa: SLF001
    bad = {"candidates": [{"content": {"parts": [{"text": "not json"}]}}]}
    assert GeminiClient._extract(bad) is None  # noqa: SLF001


def test_prompt_lists_sections_and_context():
    prompt = build_audit_narrative_prompt({"period": "Q1 2025"})
    for key in NARRATIVE_SECTIONS:
        assert key in prompt
    assert '"period": "Q1 2025"' in prompt


@pytest.mark.parametrize(
    "error",
    [
        RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("reset by peer"),
        IncompleteRead(b"{"),
    ],
)
def test_generate_json_swallows_transport_errors(error):
    client = GeminiClient(LLMConfig(api_key="k"))
    with mock.patch("urllib.request.urlopen", side_effect=error):
        assert client.generate_json("prompt") is None
