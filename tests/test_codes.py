"""Kimlik, token ve redeem code üretimi."""
from app.services.codes import (
    REDEEM_CODE_ALPHABET,
    REDEEM_CODE_LENGTH,
    new_access_token,
    new_order_id,
    new_redeem_code,
    normalize_redeem_code,
)


def test_alphabet_has_32_unambiguous_symbols():
    assert len(REDEEM_CODE_ALPHABET) == 32
    assert len(set(REDEEM_CODE_ALPHABET)) == 32
    for confusable in "0O1I":
        assert confusable not in REDEEM_CODE_ALPHABET


def test_redeem_code_shape():
    for _ in range(200):
        code = new_redeem_code()
        assert len(code) == REDEEM_CODE_LENGTH
        assert set(code) <= set(REDEEM_CODE_ALPHABET)


def test_ids_and_tokens_are_unique():
    ids = {new_order_id() for _ in range(500)}
    tokens = {new_access_token() for _ in range(500)}
    assert len(ids) == 500
    assert len(tokens) == 500


def test_access_token_is_long_and_distinct_from_code():
    token = new_access_token()
    assert len(token) >= 40
    assert token != new_redeem_code()


def test_normalize_redeem_code():
    assert normalize_redeem_code("  ab3xyz ") == "AB3XYZ"
    assert normalize_redeem_code("") == ""
