"""Tests for pkce.py — state, verifier and S256 challenge."""
import base64
import hashlib
import re

import pytest

from album_purge.pkce import (
    generate_code_challenge,
    generate_code_verifier,
    generate_pkce_pair,
    generate_state,
)

_UNRESERVED = re.compile(r"^[A-Za-z0-9\-_]+$")


def test_verifier_length_and_alphabet():
    verifier = generate_code_verifier()
    assert len(verifier) == 128
    assert _UNRESERVED.match(verifier)


def test_verifier_custom_length():
    assert len(generate_code_verifier(43)) == 43


@pytest.mark.parametrize("length", [42, 129])
def test_verifier_rejects_out_of_range(length):
    with pytest.raises(ValueError, match="between 43 and 128"):
        generate_code_verifier(length)


def test_challenge_is_s256_without_padding():
    verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
    # RFC 7636 appendix B
    assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_pair_matches():
    verifier, challenge = generate_pkce_pair()
    expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).rstrip(b"=").decode()
    assert challenge == expected
    assert "=" not in challenge


def test_state_is_random():
    assert generate_state() != generate_state()
    assert _UNRESERVED.match(generate_state())
