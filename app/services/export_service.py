"""
Export des Analytics-Reports als CSV (Tabellenkalkulation) oder PDF (Ausdruck).

Beide Formate enthalten dieselben sechs Abschnitte in derselben Reihenfolge:
Zusammenfassung, Tage, Uhrzeiten, Turns, Quellen, Auslastung heute.
"""
import csv
from datetime import date, datetime
from io import BytesIO, StringIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
from reportlab.lib.enums import TA_CENTER

from app.config import settings
from app.schemas.analytics import AnalyticsResponse

UTF8_BOM = "\ufeff"


# ============ HILFSFUNKTIONEN ============

def format_trend(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


def format_day(value: str) -> str:
    """YYYY-MM-DD -> TT.MM.JJJJ"""
    return date.fromisoformat(value).strftime("%d.%m.%Y")


def export_filename(period: str, extension: str, now: datetime) -> str:
    return f"analytics_{period}_{now.strftime('%Y-%m-%d_%H-%M')}.{extension}"


def _sections(report: AnalyticsResponse) -> list[tuple[str, list[str], list[list[str]]]]:
    """(Titel, Kopfzeile, Zeilen) pro Abschnitt, gemeinsam für CSV und PDF"""
    trends = report.trends
    summary = [
        ["Reservierungen gesamt", str(report.total_reservations), format_trend(trends.reservations)],
        ["Gäste gesamt", str(report.total_guests), format_trend(trends.guests)],
        ["Ø Personen", f"{report.avg_party_size:.1f}", format_trend(trends.avg_party_size)],
        ["Auslastung", f"{report.occupancy_rate:.1f}%", format_trend(trends.occupancy_rate)],
    ]

    days = [[format_day(d.date), str(d.count), str(d.guests)] for d in report.reservations_by_day]
    hours = [[f"{h.hour}:00", str(h.count), str(h.guests)] for h in report.reservations_by_time]

    turns = []
    for t in report.reservations_by_turn:
        occupancy = t.guests / t.capacity * 100 if t.capacity > 0 else 0.0
        turns.append([t.turn, str(t.guests), str(t.capacity), f"{occupancy:.1f}%", str(t.capacity - t.guests)])

    sources = [[s.source, str(s.count), f"{s.percentage:.1f}%"] for s in report.reservations_by_sources]

    today = [
        [o.turn, str(o.current_guests), str(o.max_capacity), f"{o.percentage:.1f}%", str(o.max_capacity - o.current_guests)]
        for o in report.real_time_occupancy
    ]

    return [
        ("ZUSAMMENFASSUNG", ["Kennzahl", "Wert", "Trend %"], summary),
        ("VERLAUF PRO TAG", ["Datum", "Reservierungen", "Gäste"], days),
        ("VERTEILUNG NACH UHRZEIT", ["Uhrzeit", "Reservierungen", "Gäste"], hours),
        ("AUSLASTUNG PRO TURN", ["Turn", "Ø Gäste", "Kapazität", "% Auslastung", "Freie Plätze"], turns),
        ("RESERVIERUNGSQUELLEN", ["Quelle", "Anzahl", "Anteil"], sources),
        ("AUSLASTUNG HEUTE", ["Turn", "Gäste aktuell", "Max. Kapazität", "% Auslastung", "Freie Plätze"], today),
    ]


# ============ CSV ============

def analytics_to_csv(report: AnalyticsResponse) -> str:
    """CSV mit BOM, damit Excel Umlaute/Akzente richtig erkennt"""
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    for index, (title, header, rows) in enumerate(_sections(report)):
        if index > 0:
            writer.writerow([])
        writer.writerow([title])
        writer.writerow(header)
        writer.writerows(rows)

    return UTF8_BOM + buffer.getvalue()


# ============ PDF ============

def get_custom_styles():
    """Paragraph-Styles für den Report"""
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='DocTitle',
        parent=styles['Heading1'],
        fontSize=18,
        spaceAfter=4*mm,
        textColor=colors.HexColor('#333333')
    ))

    styles.add(ParagraphStyle(
        name='Meta',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.HexColor('#666666')
    ))

    styles.add(ParagraphStyle(
        name='SectionHeader',
        parent=styles['Heading2'],
        fontSize=12,
        spaceBefore=8*mm,
        spaceAfter=3*mm,
        textColor=colors.HexColor('#444444')
    ))

    styles.add(ParagraphStyle(
        name='Footer',
        parent=styles['Normal'],
        fontSize=8,
        textColor=colors.HexColor('#888888'),
        alignment=TA_CENTER
    ))

    return styles


TABLE_STYLE = TableStyle([
    # Header
    ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f5f5f5')),
    ('FONTSIZE', (0, 0), (-1, 0), 9),
    ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
    ('BOTTOMPADDING', (0, 0), (-1, 0), 4),
    ('TOPPADDING', (0, 0), (-1, 0), 4),

    # Body
    ('FONTSIZE', (0, 1), (-1, -1), 9),
    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ('BOTTOMPADDING', (0, 1), (-1, -1), 3),
    ('TOPPADDING', (0, 1), (-1, -1), 3),

    # Grid
    ('LINEBELOW', (0, 0), (-1, 0), 1, colors.HexColor('#cccccc')),
    ('LINEBELOW', (0, 1), (-1, -2), 0.5, colors.HexColor('#eeeeee')),
    ('LINEBELOW', (0, -1), (-1, -1), 1, colors.HexColor('#cccccc')),
])


def analytics_to_pdf(report: AnalyticsResponse, restaurant_name: str, period: str, generated_at: datetime) -> bytes:
    """
    Report als A4-PDF.

    Args:
        report: fertiger Analytics-Report
        restaurant_name: Name für die Überschrift
        period: Zeitraum-Kürzel (7d, this_month, ...)
        generated_at: Zeitpunkt für die Meta-Zeile

    Returns:
        PDF als bytes
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=20*mm,
        leftMargin=20*mm,
        topMargin=20*mm,
        bottomMargin=20*mm
    )

    styles = get_custom_styles()
    story = []

    # ---- TITEL + META ----

    story.append(Paragraph(f"Analytics · {escape(restaurant_name)}", styles['DocTitle']))
    story.append(Paragraph(
        f"Zeitraum: {period} · erstellt am {generated_at.strftime('%d.%m.%Y %H:%M')}",
        styles['Meta']
    ))
    story.append(Spacer(1, 5*mm))
    story.append(HRFlowable(width="100%", thickness=0.5, color=colors.HexColor('#cccccc')))

    # ---- ABSCHNITTE ----

    for title, header, rows in _sections(report):
        story.append(Paragraph(title.capitalize(), styles['SectionHeader']))
        if not rows:
            story.append(Paragraph("Keine Daten", styles['Meta']))
            continue
        table = Table([header] + rows, repeatRows=1)
        table.setStyle(TABLE_STYLE)
        story.append(table)

    # ---- FOOTER ----

    story.append(Spacer(1, 15*mm))
    story.append(HRFlowable(width="100%", thickness=0.5, color=colors.HexColor('#cccccc')))
    story.append(Spacer(1, 3*mm))
    story.append(Paragraph(settings.app_name, styles['Footer']))

    doc.build(story)
    return buffer.getvalue()
