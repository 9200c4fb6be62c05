"""Anti-forgery token lifetime checks."""

from livesearch.config import settings
from livesearch.nonce import issue_nonce, verify_nonce

HALF_LIFE = settings.nonce_lifetime_seconds / 2
NOW = 1_700_000_000.0


def test_token_valid_in_issuing_tick():
    assert verify_nonce(issue_nonce(now=NOW), now=NOW) == 1


def test_token_valid_one_tick_later():
    assert verify_nonce(issue_nonce(now=NOW), now=NOW + HALF_LIFE) == 2


def test_token_expires_after_two_ticks():
    assert verify_nonce(issue_nonce(now=NOW), now=NOW + 2 * HALF_LIFE + 1) == 0


def test_token_bound_to_action():
    token = issue_nonce("live_search", now=NOW)

    assert verify_nonce(token, "other_action", now=NOW) == 0


def test_garbage_tokens_are_rejected():
    assert verify_nonce(None) == 0
    assert verify_nonce("") == 0
    assert verify_nonce("ñöñ-ascii") == 0
