import re

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def is_valid_date(date_str: str) -> bool:
    """Только канонический вид YYYY-MM-DD: такие строки сортируются как даты"""
    return bool(_DATE_RE.fullmatch(date_str or ""))
