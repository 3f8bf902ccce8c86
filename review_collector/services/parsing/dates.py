from datetime import datetime, timezone

# "Jan 5, 2016" is what the US storefront sends; full month names show up on
# some older pages.
REVIEW_DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y")


def parse_review_date(text: str) -> datetime:
    """Parse a month/day/year review date into a UTC midnight timestamp.

    Raises ValueError when no known format matches.
    """
    s = (text or "").strip()
    for fmt in REVIEW_DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized review date: {text!r}")


def format_review_date(dt: datetime) -> str:
    """Inverse of parse_review_date, in the storefront's short form."""
    return f"{dt:%b} {dt.day}, {dt.year}"
