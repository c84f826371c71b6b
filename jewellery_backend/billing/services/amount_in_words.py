# billing/services/amount_in_words.py

"""
Rupee amounts in words, Indian numbering (Thousand / Lakh / Crore).

    amount_in_words(Decimal("1272.40"))
    -> "One Thousand Two Hundred Seventy Two Rupees and Forty Paise Only"
"""

from __future__ import annotations

from core.money import money

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def number_to_words(n: int) -> str:
    if n < 0:
        return f"Minus {number_to_words(-n)}"
    if n == 0:
        return "Zero"
    return _words(n).strip()


def _words(n: int) -> str:
    if n == 0:
        return ""
    if n < 20:
        return ONES[n]
    if n < 100:
        return f"{TENS[n // 10]} {ONES[n % 10]}".strip()
    if n < THOUSAND:
        return f"{ONES[n // 100]} Hundred {_words(n % 100)}".strip()
    if n < LAKH:
        return f"{_words(n // THOUSAND)} Thousand {_words(n % THOUSAND)}".strip()
    if n < CRORE:
        return f"{_words(n // LAKH)} Lakh {_words(n % LAKH)}".strip()
    return f"{_words(n // CRORE)} Crore {_words(n % CRORE)}".strip()


def amount_in_words(amount) -> str:
    value = money(amount)
    negative = value < 0
    value = abs(value)

    rupees = int(value)
    paise = int((value - rupees) * 100)

    text = f"{number_to_words(rupees)} Rupees"
    if paise:
        text += f" and {number_to_words(paise)} Paise"
    text += " Only"

    return f"Minus {text}" if negative else text
