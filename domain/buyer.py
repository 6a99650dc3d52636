"""
Domain: Buyer identity helpers (pure).

Normalisation rules applied to checkout input before it is stored or sent to
the payment gateway.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(cpf: str) -> str:
    """
    Strip every non-digit character from a CPF.

    Example:
        normalize_cpf("123.456.789-00")  # "12345678900"
    """

    return _NON_DIGITS.sub("", cpf)


def split_full_name(full_name: str) -> tuple[str, str]:
    """
    Split a full name into (first_name, last_name).

    The first token is the first name; the remaining tokens, joined by a
    single space, are the last name. A single token yields an empty last name.

    Example:
        split_full_name("Maria Silva Souza")  # ("Maria", "Silva Souza")
        split_full_name("Maria")              # ("Maria", "")
    """

    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


@dataclass(frozen=True, slots=True)
class Payer:
    """Buyer identity as sent to the payment gateway."""

    email: str
    first_name: str
    last_name: str
    cpf: str

    @classmethod
    def from_checkout(cls, full_name: str, email: str, cpf: str) -> "Payer":
        first_name, last_name = split_full_name(full_name)
        return cls(
            email=email.strip(),
            first_name=first_name,
            last_name=last_name,
            cpf=normalize_cpf(cpf),
        )

    def to_gateway_payload(self) -> dict:
        return {
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "identification": {"type": "CPF", "number": self.cpf},
        }
