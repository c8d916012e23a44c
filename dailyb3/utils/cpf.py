"""CPF (Cadastro de Pessoas Fisicas) validation utilities."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

CPF_LENGTH = 11


def normalize_cpf(value: Optional[str]) -> str:
    """
    Strip formatting characters from a CPF.

    Args:
        value: Raw CPF input (e.g., "111.444.777-35")

    Returns:
        Digits only (e.g., "11144477735"); empty string for None
    """
    if not value:
        return ""
    return "".join(ch for ch in str(value) if "0" <= ch <= "9")


def _check_digit(digits: str) -> int:
    """Compute one modulo-11 check digit; weights descend to 2."""
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    result = 11 - (total % 11)
    return 0 if result >= 10 else result


def validate_cpf(value: Optional[str]) -> bool:
    """
    Validate a CPF against the modulo-11 check-digit algorithm.

    Formatting characters are ignored. Sequences of one repeated digit
    (e.g., "11111111111") pass the arithmetic but are rejected.

    Args:
        value: CPF string

    Returns:
        True if the CPF is valid

    Example:
        >>> validate_cpf("111.444.777-35")
        True
        >>> validate_cpf("11144477734")
        False
    """
    cpf = normalize_cpf(value)

    if len(cpf) != CPF_LENGTH:
        return False

    if cpf == cpf[0] * CPF_LENGTH:
        return False

    first = _check_digit(cpf[:9])
    second = _check_digit(cpf[:10])

    return first == int(cpf[9]) and second == int(cpf[10])
