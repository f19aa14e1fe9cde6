"""Random fixed-length numeric code generator."""

from __future__ import annotations

import secrets


class CodeGenerator:
    """Produces codes of exactly *length* decimal digits.

    Every value in ``0 .. 10**length - 1`` is equally likely, leading zeros
    included, so a 4-digit generator draws from 10 000 codes.
    """

    def __init__(self, length: int = 4) -> None:
        if length < 1:
            raise ValueError("Code length must be at least 1")
        self.length = length

    def generate(self) -> str:
        return str(secrets.randbelow(10**self.length)).zfill(self.length)
