from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from gst_purchases.db.memory import store
from gst_purchases.schemas.report import ReportSummary, PurchasesBySupplier, PurchaseRegister, ReportPeriod
from typing import List, Optional
import logging
import io
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib import colors

router = APIRouter()
logger = logging.getLogger(__name__)

def build_register(date_from: Optional[str], date_to: Optional[str]) -> PurchaseRegister:
    return PurchaseRegister(
        period=ReportPeriod(date_from=date_from, date_to=date_to),
        summary=store.get_report_summary(date_from, date_to),
        by_supplier=store.get_purchases_by_supplier(date_from, date_to),
    )

@router.get("/reports/summary", response_model=ReportSummary)
async def get_report_summary(date_from: Optional[str] = Query(None), date_to: Optional[str] = Query(None)):
    return store.get_report_summary(date_from, date_to)

@router.get("/reports/by-supplier", response_model=List[PurchasesBySupplier])
async def get_purchases_by_supplier(date_from: Optional[str] = Query(None), date_to: Optional[str] = Query(None)):
    return store.get_purchases_by_supplier(date_from, date_to)

@router.get("/reports/purchases/pdf")
async def get_purchase_register_pdf(date_from: Optional[str] = Query(None), date_to: Optional[str] = Query(None)):
    logger.info(f"Purchase register PDF STARTED for period {date_from or '*'}..{date_to or '*'}")

    register = build_register(date_from, date_to)
    purchases = store.export_purchases(date_from, date_to)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4))
    styles = getSampleStyleSheet()
    elements = []

    # 1. Header
    elements.append(Paragraph("Purchase Register", styles['Title']))
    elements.append(Spacer(1, 12))
    elements.append(Paragraph(f"<b>Period:</b> {date_from or 'start'} to {date_to or 'today'}", styles['Normal']))
    elements.append(Paragraph(f"<b>Generated:</b> {register.period.generated_at.strftime('%Y-%m-%d %H:%M:%S')}", styles['Normal']))
    elements.append(Spacer(1, 24))

    # 2. Summary Table
    elements.append(Paragraph("Summary", styles['Heading2']))
    summary_data = [
        ["Metric", "Value"],
        ["Total Purchases", f"Rs. {register.summary.total_purchases:.2f}"],
        ["Total GST", f"Rs. {register.summary.total_gst:.2f}"],
        ["Suppliers", str(register.summary.total_suppliers)],
        ["Line Items", str(register.summary.total_items)],
    ]
    summary_table = Table(summary_data, colWidths=[200, 150])
    summary_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.navy),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey)
    ]))
    elements.append(summary_table)
    elements.append(Spacer(1, 24))

    # 3. By Supplier
    elements.append(Paragraph("By Supplier", styles['Heading2']))
    supplier_data = [["Supplier", "Total Purchases"]]
    for row in register.by_supplier:
        supplier_data.append([row.supplier_name, f"Rs. {row.total_purchases:.2f}"])
    supplier_table = Table(supplier_data, colWidths=[250, 150])
    supplier_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.navy),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (1, 1), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey)
    ]))
    elements.append(supplier_table)
    elements.append(Spacer(1, 24))

    # 4. Register
    elements.append(Paragraph("Entries", styles['Heading2']))
    names = {s.id: s.name for s in store.suppliers.values()}
    register_data = [["Date", "Invoice No", "Supplier", "Basic", "CGST", "SGST", "IGST", "TDS", "Invoice Value"]]
    for p in purchases:
        register_data.append([
            p.date,
            p.invoice_no,
            names.get(p.supplier_id, "-"),
            f"{p.basic_value:.2f}",
            f"{p.cgst:.2f}",
            f"{p.sgst:.2f}",
            f"{p.igst:.2f}",
            f"{p.tds_value:.2f}",
            f"{p.invoice_value:.2f}",
        ])
    register_table = Table(register_data, repeatRows=1)
    register_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.navy),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (3, 1), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('FONTSIZE', (0, 0), (-1, -1), 8)
    ]))
    elements.append(register_table)

    # 5. Footer
    elements.append(Spacer(1, 48))
    footer_text = "TDS is shown for reference and is not deducted from the invoice value."
    elements.append(Paragraph(footer_text, ParagraphStyle(name='Footer', fontSize=8, textColor=colors.grey, alignment=1)))

    try:
        doc.build(elements)
    except Exception as e:
        logger.error(f"PDF Build Failed: {str(e)}")
        raise HTTPException(status_code=500, detail="PDF generation failed during document build.")

    pdf_bytes = buffer.getvalue()
    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=Purchase_Register_{date_from or 'all'}_{date_to or 'all'}.pdf",
            "Content-Length": str(len(pdf_bytes))
        }
    )
