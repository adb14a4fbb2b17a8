from typing import Optional

# Invoice dates are typed as DD-MM-YY and stored as YYYY-MM-DD.
# Neither direction validates; anything unexpected is passed through as is.

def to_canonical(compact: Optional[str]) -> str:
    if not compact:
        return ""
    parts = compact.split("-")
    if len(parts) != 3:
        return compact
    day, month, year = parts
    full_year = f"20{year}" if len(year) == 2 else year
    return f"{full_year}-{month.zfill(2)}-{day.zfill(2)}"

def to_compact(canonical: Optional[str]) -> str:
    if not canonical:
        return ""
    if len(canonical) != 10:
        return canonical
    parts = canonical.split("-")
    if len(parts) != 3:
        return canonical
    year, month, day = parts
    return f"{day}-{month}-{year[2:]}"
