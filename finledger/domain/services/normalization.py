"""Domain normalization helpers."""


def normalize_currency_code(code: str | None) -> str | None:
    """Normalize currency code values.

    Args:
        code: Raw currency code from a repository or caller.

    Returns:
        str | None: Upper-cased code, or None when empty.
    """
    if not code:
        return None
    cleaned = code.strip()
    return cleaned.upper() if cleaned else None


def require_currency_code(code: str | None) -> str:
    """Normalize a currency code that must be present.

    Args:
        code: Raw currency code.

    Returns:
        str: Upper-cased code.

    Raises:
        ValueError: If the code is empty.
    """
    normalized = normalize_currency_code(code)
    if normalized is None:
        raise ValueError(f"Invalid currency code: {code!r}")
    return normalized


__all__ = ["normalize_currency_code", "require_currency_code"]
