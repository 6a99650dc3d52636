"""
Tests for `domain/buyer.py`.

Covers contract rules:
- CPF is stored digits-only.
- Full name splits into first token / remaining tokens.
"""

from __future__ import annotations

from domain.buyer import Payer, normalize_cpf, split_full_name


def test_normalize_cpf_strips_punctuation() -> None:
    assert normalize_cpf("123.456.789-00") == "12345678900"
    assert normalize_cpf(" 111 222 333 44 ") == "11122233344"
    assert normalize_cpf("12345678900") == "12345678900"


def test_normalize_cpf_without_digits_is_empty() -> None:
    assert normalize_cpf("abc.def-gh") == ""


def test_split_full_name_single_token() -> None:
    assert split_full_name("Maria") == ("Maria", "")


def test_split_full_name_multiple_tokens() -> None:
    assert split_full_name("Maria Silva Souza") == ("Maria", "Silva Souza")


def test_split_full_name_collapses_whitespace() -> None:
    assert split_full_name("  Ana   Souza  ") == ("Ana", "Souza")


def test_payer_gateway_payload() -> None:
    """Verify the payer block matches what Mercado Pago expects."""

    payer = Payer.from_checkout("Ana Souza", "a@x.com", "111.222.333-44")

    assert payer.to_gateway_payload() == {
        "email": "a@x.com",
        "first_name": "Ana",
        "last_name": "Souza",
        "identification": {"type": "CPF", "number": "11122233344"},
    }
