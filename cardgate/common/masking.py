"""Card number projections that are safe to return or log."""


def last_four(card_number: str | None) -> str:
    """Last four characters of a card number, or "" when it is shorter than that."""

    if not card_number or len(card_number) < 4:
        return ""
    return card_number[-4:]


def mask_card_number(card_number: str | None) -> str:
    # Used for log lines; the full number never reaches the logs.
    suffix = last_four(card_number)
    if not suffix:
        return "****"
    return f"****{suffix}"
