"""
PDF Invoice Generation Service
Renders a stored invoice with the clinic letterhead, client block and line items
"""
from io import BytesIO
from datetime import datetime
from decimal import Decimal
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER

from app.core.config import Settings
from app.models.invoice import Invoice

PRIMARY_GREEN = colors.HexColor('#228b22')


def _money(settings: Settings, amount: Decimal) -> str:
    return f"{settings.CURRENCY_LABEL} {amount:,.2f}"


def generate_invoice_pdf(invoice: Invoice, settings: Settings) -> BytesIO:
    """
    Generate PDF for an invoice

    Args:
        invoice: Stored invoice; its items and totals are printed as recorded
        settings: Supplies the clinic letterhead and currency label

    Returns:
        BytesIO buffer containing PDF data
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=0.5*inch,
        bottomMargin=0.5*inch,
        title=f"Invoice {invoice.bill_number}",
    )

    elements = []
    styles = getSampleStyleSheet()

    letterhead_style = ParagraphStyle(
        'Letterhead',
        parent=styles['Heading2'],
        fontSize=14,
        textColor=colors.white,
        spaceAfter=2
    )

    letterhead_small = ParagraphStyle(
        'LetterheadSmall',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.white
    )

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=20,
        alignment=TA_CENTER,
        spaceAfter=12
    )

    heading_style = ParagraphStyle(
        'CustomHeading',
        parent=styles['Heading2'],
        fontSize=12,
        textColor=colors.HexColor('#1f2937'),
        spaceAfter=6
    )

    normal_style = ParagraphStyle(
        'CustomNormal',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#374151')
    )

    # Letterhead band
    letterhead = Table(
        [[Paragraph(escape(settings.CLINIC_NAME), letterhead_style)],
         [Paragraph(f"({escape(settings.CLINIC_ADDRESS)})", letterhead_small)],
         [Paragraph(f"GSTIN: <b>{escape(settings.CLINIC_GSTIN)}</b>", letterhead_small)]],
        colWidths=[6.5*inch],
    )
    letterhead.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), PRIMARY_GREEN),
        ('LEFTPADDING', (0, 0), (-1, -1), 10),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(letterhead)
    elements.append(Spacer(1, 0.2*inch))
    elements.append(Paragraph("INVOICE", title_style))

    # Bill-to and invoice info side by side
    info_data = [
        [
            Paragraph(f"<b>Bill To:</b><br/>"
                      f"{escape(invoice.client_name)}<br/>"
                      f"{escape(invoice.client_address)}<br/>"
                      f"Phone: {escape(invoice.client_phone)}", normal_style),
            Paragraph(f"<b>Bill No:</b> {escape(invoice.bill_number)}<br/>"
                      f"<b>Date:</b> {escape(invoice.issue_date)}<br/>"
                      f"<b>Items:</b> {len(invoice.items)}", normal_style)
        ]
    ]
    info_table = Table(info_data, colWidths=[3.5*inch, 3*inch])
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 0.3*inch))

    # Line items
    items_data = [["#", "Medicine", "Qty", "Rate", "Amount"]]
    for index, item in enumerate(invoice.items, start=1):
        items_data.append([
            str(index),
            Paragraph(escape(item.medicine_name), normal_style),
            str(item.quantity),
            _money(settings, item.rate),
            _money(settings, item.amount),
        ])

    items_table = Table(items_data, colWidths=[0.4*inch, 3*inch, 0.7*inch, 1.2*inch, 1.2*inch], repeatRows=1)
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), PRIMARY_GREEN),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f0f0f0')]),
        ('TOPPADDING', (0, 1), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 6),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # Totals as recorded on the invoice
    total_data = [
        ['', '', Paragraph("<b>Subtotal:</b>", normal_style), _money(settings, invoice.subtotal)],
        ['', '', Paragraph(f"<b>Tax ({invoice.tax_percentage.normalize():f}%):</b>", normal_style),
         _money(settings, invoice.tax_amount)],
        ['', '', Paragraph("<b>TOTAL DUE:</b>", heading_style),
         Paragraph(f"<b>{_money(settings, invoice.total_due)}</b>", heading_style)]
    ]
    total_table = Table(total_data, colWidths=[0.4*inch, 3*inch, 1.9*inch, 1.2*inch])
    total_table.setStyle(TableStyle([
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('LINEABOVE', (2, 2), (-1, 2), 1, colors.black),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    elements.append(total_table)

    # Footer
    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    elements.append(Spacer(1, 0.5*inch))
    elements.append(Paragraph("Thank you for visiting!", footer_style))
    elements.append(Paragraph(escape(settings.CLINIC_CONTACT), footer_style))
    elements.append(Paragraph(f"Invoice generated on {datetime.now().strftime('%d %b %Y at %I:%M %p')}", footer_style))

    doc.build(elements)

    buffer.seek(0)
    return buffer
