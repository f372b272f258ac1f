from __future__ import annotations

from docflow_agents.info_provider.lookup import candidate_keys, resolve_by_candidates


def test_candidate_keys_prefer_agent_suffix() -> None:
    assert candidate_keys("classifier") == ("classifier_agent", "classifier")


def test_suffixed_key_wins_over_bare_key() -> None:
    mapping = {"classifier": "bare", "classifier_agent": "suffixed"}

    assert resolve_by_candidates(mapping, "classifier") == ("classifier_agent", "suffixed")


def test_bare_key_used_when_suffixed_absent() -> None:
    assert resolve_by_candidates({"summary": 1}, "summary") == ("summary", 1)


def test_no_match_returns_none() -> None:
    assert resolve_by_candidates({"other": 1}, "summary") is None
