"""Logging helpers shared by the transport and server layers."""


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Mask a secret so only its leading and trailing characters remain.

    Args:
        value: The secret to mask
        keep_chars: Number of characters to keep visible at each end

    Returns:
        The masked value, or "Not Provided" when there is nothing to mask
    """
    if not value:
        return "Not Provided"
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    middle = "*" * (len(value) - keep_chars * 2)
    return f"{value[:keep_chars]}{middle}{value[-keep_chars:]}"
