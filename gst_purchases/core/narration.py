from typing import Optional

def build_narration(
    part_text: Optional[str],
    supplier_name: Optional[str],
    invoice_no: Optional[str],
    invoice_date: Optional[str],
    tds: float = 0.0,
    tds_flag: bool = False,
    tds_rate: Optional[float] = None,
) -> str:
    """Auto narration shown on the entry form and submitted unless overridden."""
    text = (
        f"{part_text or 'part'} purchased from {supplier_name or 'supplier'} "
        f"Invoice no {invoice_no or '-'} / {invoice_date or ''}"
    )
    rate = tds_rate or 0.0
    if tds_flag and rate > 0:
        text += f" TDS amounted {tds:.2f} deducted for {rate:.2f}% Assessable value"
    return text
