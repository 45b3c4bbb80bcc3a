"""
Address abbreviation for schedule titles.

Korean street addresses are long; schedule titles only need enough to find
the site. Three rules are tried in order:

1. Apartment/complex name plus building and unit ("래미안아파트 101-1203")
2. Neighborhood plus lot number ("역삼동 123-4번지")
3. The last three whitespace-separated tokens
"""

import re

COMPLEX_PATTERN = re.compile(
    r"(\S+아파트|\S+오피스텔|\S+빌라|\S+타워|힐스테이트|센트럴|삼성|현대|롯데)"
    r"(?:[^\d]*?(\d{1,3})동)?"
    r"(?:\s*(\d{1,4})호)?"
)

LOT_PATTERN = re.compile(r"([가-힣]+동)\s?(\d{1,5}(?:-\d{1,5})?(?:번지?)?)")

FALLBACK_TOKEN_COUNT = 3


def abbreviate_address(address: str | None) -> str:
    """Shorten an address for use in a schedule title."""
    if not address or not address.strip():
        return ""

    match = COMPLEX_PATTERN.search(address)
    if match:
        name, building, unit = match.groups()
        if building and unit:
            return f"{name} {building}-{unit}"
        if building:
            return f"{name} {building}동"
        if unit:
            return f"{name} {unit}호"
        return name

    match = LOT_PATTERN.search(address)
    if match:
        return f"{match.group(1)} {match.group(2)}"

    tokens = address.split()
    if len(tokens) < FALLBACK_TOKEN_COUNT:
        return address.strip()
    return " ".join(tokens[-FALLBACK_TOKEN_COUNT:])
