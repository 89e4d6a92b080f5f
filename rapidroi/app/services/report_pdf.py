"""
ROI Report PDF Generation Service

Renders the personalized ROI blueprint with ReportLab: cover page, executive
summary with a pie chart of the three benefit buckets, detailed analysis
table, organization parameters, conclusion and implementation roadmap.
"""

from datetime import datetime, timezone
from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.graphics.charts.piecharts import Pie
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from rapidroi.app.models.metrics import ROIMetrics
from rapidroi.app.models.results import CalculationResult
from rapidroi.app.services.formatters import format_currency, format_number, format_percent


BRAND_PURPLE = colors.HexColor("#8b5cf6")
BRAND_GREEN = colors.HexColor("#10b981")
BRAND_LAVENDER = colors.HexColor("#e9d5ff")
HEADING_BLUE = colors.HexColor("#2c5282")

PLACEHOLDER_COMPANY = "[Client Company Name]"

IMPLEMENTATION_PHASES = (
    "1. Assessment & Planning (Month 1)",
    "2. System Integration & Training (Month 2-3)",
    "3. Pilot Launch & Testing (Month 4)",
    "4. Full Deployment & Optimization (Month 5-6)",
)


def report_filename(prefix: str = "rapidroi-analysis", when: Optional[datetime] = None) -> str:
    """
    File name for a generated report, e.g. rapidroi-analysis-2025-01-31.pdf.

    Downloads use the default prefix; emailed reports use "ROI-Report".
    """
    when = when or datetime.now(timezone.utc)
    return f"{prefix}-{when.date().isoformat()}.pdf"


def impact_split(result: CalculationResult) -> tuple:
    """Whole-number percentages of total impact per bucket (cost, revenue, risk)."""
    summary = result.summary
    total = summary.total_impact
    if total <= 0:
        return (0, 0, 0)
    return tuple(
        int(round(part / total * 100))
        for part in (
            summary.total_cost_savings,
            summary.total_revenue_increase,
            summary.total_risk_reduction,
        )
    )


def _impact_pie(result: CalculationResult) -> Drawing:
    summary = result.summary
    drawing = Drawing(3 * inch, 2.2 * inch)
    pie = Pie()
    pie.x = 0.6 * inch
    pie.y = 0.1 * inch
    pie.width = 2 * inch
    pie.height = 2 * inch
    values = [
        summary.total_cost_savings,
        summary.total_revenue_increase,
        summary.total_risk_reduction,
    ]
    # Pie cannot draw an all-zero series
    pie.data = values if sum(values) > 0 else [1, 0, 0]
    pie.labels = None
    pie.slices.strokeColor = colors.white
    for index, color in enumerate((BRAND_PURPLE, BRAND_GREEN, BRAND_LAVENDER)):
        pie.slices[index].fillColor = color
    drawing.add(pie)
    return drawing


def _labelled_table(rows, col_widths):
    table = Table(rows, colWidths=col_widths)
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (0, -1), HEADING_BLUE),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    return table


def generate_report_pdf(
    metrics: ROIMetrics,
    result: CalculationResult,
    company_name: Optional[str] = None,
) -> bytes:
    """
    Generate the ROI report PDF.

    Args:
        metrics: Inputs the result was computed from
        result: Evaluator output
        company_name: Shown on the cover; a placeholder when omitted

    Returns:
        PDF bytes
    """
    buffer = BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=72,
        leftMargin=72,
        topMargin=72,
        bottomMargin=36,
        title="RapidClaims ROI Blueprint",
    )

    story = []
    styles = getSampleStyleSheet()

    cover_style = ParagraphStyle(
        'CoverTitle',
        parent=styles['Heading1'],
        fontSize=32,
        leading=40,
        textColor=BRAND_PURPLE,
        spaceAfter=30,
        fontName='Helvetica-Bold'
    )

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=20,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )

    heading_style = ParagraphStyle(
        'CustomHeading',
        parent=styles['Heading2'],
        fontSize=14,
        textColor=HEADING_BLUE,
        spaceAfter=12,
        spaceBefore=16,
        fontName='Helvetica-Bold'
    )

    body_style = ParagraphStyle(
        'CustomBody',
        parent=styles['Normal'],
        fontSize=10,
        leading=14,
        spaceAfter=6,
        fontName='Helvetica'
    )

    impact_style = ParagraphStyle(
        'Impact',
        parent=styles['Heading1'],
        fontSize=28,
        textColor=BRAND_PURPLE,
        spaceAfter=4,
        fontName='Helvetica-Bold'
    )

    quote_style = ParagraphStyle(
        'Quote',
        parent=styles['Normal'],
        fontSize=12,
        alignment=TA_CENTER,
        textColor=BRAND_PURPLE,
        fontName='Helvetica-Oblique'
    )

    summary = result.summary

    # Page 1: cover
    story.append(Spacer(1, 2 * inch))
    story.append(Paragraph("Your Personalized<br/>ROI Blueprint", cover_style))
    story.append(Paragraph("<b>Prepared for:</b>", body_style))
    story.append(Paragraph(escape(company_name or PLACEHOLDER_COMPANY), body_style))
    story.append(Spacer(1, 3 * inch))
    story.append(Paragraph("<b>RapidClaims</b>", body_style))
    story.append(PageBreak())

    # Page 2: executive summary
    story.append(Paragraph("Your Financial Future at a Glance", title_style))
    story.append(Paragraph("Executive Summary", heading_style))
    story.append(Paragraph(
        "This ROI analysis models the financial impact of adopting RapidClaims' "
        "AI-powered medical coding solutions, using your organization's operational data.",
        body_style,
    ))
    story.append(Paragraph(format_currency(summary.total_impact), impact_style))
    story.append(Paragraph("Estimated Annual Financial Impact", body_style))
    story.append(Spacer(1, 0.15 * inch))

    buckets = Table(
        [
            [
                format_currency(summary.total_cost_savings),
                format_currency(summary.total_revenue_increase),
                format_currency(summary.total_risk_reduction),
            ],
            ["in Cost Savings", "in Revenue Uplift", "in Risk Reduction"],
        ],
        colWidths=[2 * inch] * 3,
    )
    buckets.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 13),
        ('FONTSIZE', (0, 1), (-1, 1), 9),
        ('BACKGROUND', (0, 0), (-1, -1), BRAND_LAVENDER),
        ('LINEAFTER', (0, 0), (1, -1), 1, colors.white),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    story.append(buckets)
    story.append(Spacer(1, 0.15 * inch))
    story.append(Paragraph(
        "The analysis shows a compelling return on investment, with strong cost "
        "reductions supported by compliance improvements and modest revenue uplift.",
        body_style,
    ))

    story.append(Paragraph("Financial Impact Breakdown", heading_style))
    cost_pct, revenue_pct, risk_pct = impact_split(result)
    breakdown = Table(
        [
            [
                [
                    Paragraph(f"<b>{cost_pct}% Cost Savings</b>", body_style),
                    Paragraph(
                        "Driven by AI automation that boosts coder productivity "
                        "and eliminates manual tasks.",
                        body_style,
                    ),
                    Paragraph(f"<b>{revenue_pct}% Revenue Increase</b>", body_style),
                    Paragraph(
                        "Driven by improved coding accuracy that captures missed "
                        "reimbursements.",
                        body_style,
                    ),
                    Paragraph(f"<b>{risk_pct}% Risk Reduction</b>", body_style),
                    Paragraph(
                        "Driven by enhanced compliance, reducing audit and penalty exposure.",
                        body_style,
                    ),
                ],
                _impact_pie(result),
            ]
        ],
        colWidths=[3.2 * inch, 3 * inch],
    )
    breakdown.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    story.append(breakdown)

    story.append(_labelled_table(
        [
            ["Cost Savings:", format_currency(summary.total_cost_savings)],
            ["Revenue Increase:", format_currency(summary.total_revenue_increase)],
            ["Risk Reduction:", format_currency(summary.total_risk_reduction)],
        ],
        [2 * inch, 2 * inch],
    ))
    story.append(Spacer(1, 0.3 * inch))
    story.append(Paragraph(
        '"Imagine recovering every collectible dollar, automatically."', quote_style
    ))
    story.append(PageBreak())

    # Page 3: detailed analysis, parameters, conclusion
    story.append(Paragraph("Detailed Financial Analysis", heading_style))
    analysis_rows = [
        ["Category", "Annual Value", "Description"],
        ["Cost Savings", format_currency(summary.total_cost_savings),
         Paragraph("Efficiency gains from autonomous coding and reduced manual work.", body_style)],
        ["Revenue Enhanced", format_currency(summary.total_revenue_increase),
         Paragraph("Improved claim accuracy, fewer denials, increased approved reimbursements.", body_style)],
        ["Risk Mitigation", format_currency(summary.total_risk_reduction),
         Paragraph("Compliance protection, reduced penalties, lower audit exposure.", body_style)],
        ["Total Benefit", format_currency(summary.total_impact),
         Paragraph("Combined annual financial impact", body_style)],
    ]
    analysis = Table(analysis_rows, colWidths=[1.5 * inch, 1.4 * inch, 3.3 * inch])
    analysis.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), BRAND_PURPLE),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, -1), (1, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#d1d5db')),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]))
    story.append(analysis)

    story.append(Paragraph("Organization Parameters", heading_style))
    story.append(Paragraph("The ROI model uses your organizational inputs:", body_style))
    story.append(_labelled_table(
        [
            ["Annual Revenue Claimed:", format_currency(metrics.revenue_claimed)],
            ["Number of Claims Per Year:", format_number(metrics.claims_per_annum)],
            ["Average Cost per Claim:", "Derived from revenue and claim data."],
            ["Baseline Denial Rate & Backlog:", "Applied as per inputs."],
            ["Implementation Cost:", format_currency(summary.implementation_cost)],
            ["Return on Investment:", format_percent(summary.roi)],
        ],
        [2.4 * inch, 3.6 * inch],
    ))

    story.append(Paragraph("Conclusion", heading_style))
    story.append(Paragraph("The model demonstrates a positive ROI, delivering:", body_style))
    for line in (
        f"{format_currency(summary.total_impact)} annual benefit, driven primarily by cost savings.",
        "Reduced operational strain, freeing coders and physicians from manual tasks.",
        "Compliance confidence, reducing the risk of costly penalties and audits.",
    ):
        story.append(Paragraph(line, body_style, bulletText="•"))
    story.append(Paragraph("<b>Recommendation:</b>", body_style))
    story.append(Paragraph(
        "Adoption of RapidClaims' AI solutions provides a sustainable and scalable "
        "path to reduce costs, increase revenue capture, and improve compliance "
        "simultaneously.",
        body_style,
    ))
    story.append(PageBreak())

    # Page 4: roadmap
    story.append(Paragraph("Implementation Roadmap &amp; Success Metrics", title_style))
    story.append(Paragraph("Key Implementation Phases:", heading_style))
    for phase in IMPLEMENTATION_PHASES:
        story.append(Paragraph(escape(phase), body_style))

    footer_style = ParagraphStyle(
        'Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER
    )
    story.append(Spacer(1, 0.4 * inch))
    story.append(Paragraph(
        "Projections are estimates based on the inputs provided and industry "
        "benchmarks; actual results vary by organization.",
        footer_style,
    ))

    doc.build(story)

    pdf_bytes = buffer.getvalue()
    buffer.close()

    return pdf_bytes
