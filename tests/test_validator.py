"""Tests for request validation and bit-cost admission control."""

from __future__ import annotations

import pytest

from app.core.exceptions import BudgetExceeded, InvalidBaseKey, InvalidPrefix
from app.services.job_store import JobIdentity
from app.services.validator import (
    bit_cost,
    check_request,
    normalize_prefix,
    validate_base_key,
    validate_prefix,
)
from tests.conftest import BASE_KEY


class TestNormalizePrefix:
    def test_star_becomes_dot(self):
        assert normalize_prefix("1abc*") == "1abc."

    def test_mixed_wildcards(self):
        assert normalize_prefix("**a.*") == "..a.."

    def test_no_wildcards_unchanged(self):
        assert normalize_prefix("3xyz") == "3xyz"


class TestValidateBaseKey:
    @pytest.mark.parametrize(
        "key",
        [BASE_KEY, BASE_KEY.upper(), "0" * 64, "aBcDeF" * 10 + "0123"],
    )
    def test_accepts_hex_keys(self, key):
        validate_base_key(key)

    @pytest.mark.parametrize(
        "key",
        ["", "0" * 63, "0" * 65, "z" * 64, " " + "0" * 63, None, 42],
    )
    def test_rejects_malformed_keys(self, key):
        with pytest.raises(InvalidBaseKey, match="Invalid basePublicKey"):
            validate_base_key(key)


class TestValidatePrefix:
    @pytest.mark.parametrize(
        "prefix",
        ["1", "3", ".", "1abc", "3.x.y", "1" + "a" * 59],
    )
    def test_accepts_valid_prefixes(self, prefix):
        validate_prefix(prefix)

    @pytest.mark.parametrize(
        "prefix",
        [
            "",
            "2abc",  # bad first character
            "1ab0",  # 0 is not in the address alphabet
            "1abl",  # neither is l
            "1ABC",  # upper case
            "1abc*",  # not normalized
            "1" + "a" * 60,  # too long
            None,
        ],
    )
    def test_rejects_invalid_prefixes(self, prefix):
        with pytest.raises(InvalidPrefix, match="Invalid prefix"):
            validate_prefix(prefix)


class TestBitCost:
    @pytest.mark.parametrize(
        ("prefix", "bits"),
        [
            ("", 0),
            ("1", 1),
            ("3", 1),
            ("*", 0),
            (".", 0),
            ("1abc", 97),
            ("1a*c", 65),
            ("1a.c", 65),
            (".abc", 96),
            ("*...", 0),
        ],
    )
    def test_cost(self, prefix, bits):
        assert bit_cost(prefix) == bits


class TestCheckRequest:
    def test_returns_normalized_identity(self):
        identity = check_request(BASE_KEY, "1ab*", max_bits=97)
        assert identity == JobIdentity(BASE_KEY, "1ab.")

    def test_budget_boundary_is_inclusive(self):
        check_request(BASE_KEY, "1abc", max_bits=97)
        with pytest.raises(BudgetExceeded, match="Too many bits in prefix"):
            check_request(BASE_KEY, "1abc", max_bits=96)

    def test_base_key_checked_first(self):
        with pytest.raises(InvalidBaseKey):
            check_request("nope", "bad!", max_bits=97)

    def test_non_string_prefix(self):
        with pytest.raises(InvalidPrefix):
            check_request(BASE_KEY, None, max_bits=97)
