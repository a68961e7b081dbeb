from __future__ import annotations

from pathlib import Path
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .models import MatchResult, WordSequence
from .search import DEFAULT_CONTEXT_WORDS, context_around
from .transcript import format_timestamp


def _highlight(context: str, match_text: str) -> str:
    escaped_context = escape(context)
    escaped_match = escape(match_text)
    if escaped_match and escaped_match in escaped_context:
        return escaped_context.replace(escaped_match, f"<b>{escaped_match}</b>", 1)
    return escaped_context


def export_search_pdf(
    words: WordSequence,
    matches: Sequence[MatchResult],
    query: str,
    output_path: Path,
    *,
    context_words: int = DEFAULT_CONTEXT_WORDS,
    document_title: str | None = None,
) -> Path:
    title_text = document_title or f"Search results for \"{query}\""
    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=LETTER,
        rightMargin=54,
        leftMargin=54,
        topMargin=54,
        bottomMargin=54,
    )

    styles = getSampleStyleSheet()
    title_style = styles["Heading1"]
    h2_style = styles["Heading2"]
    body_style = styles["BodyText"]
    context_style = ParagraphStyle(
        "context",
        parent=body_style,
        fontSize=10.5,
        leading=14,
        spaceAfter=8,
    )
    timestamp_style = ParagraphStyle(
        "timestamp",
        parent=body_style,
        fontSize=9.8,
        textColor=colors.HexColor("#444444"),
        leading=12,
        spaceAfter=2,
    )

    elements: list[object] = []
    elements.append(Paragraph(escape(title_text), title_style))
    elements.append(Spacer(1, 0.15 * inch))

    timing_source = "synthetic (0.5 s per word estimate)" if words.synthetic else "transcription timestamps"
    summary_rows = [
        ["Query", query],
        ["Matches", str(len(matches))],
        ["Transcript words", str(len(words))],
        ["Timing source", timing_source],
    ]
    table = Table(summary_rows, colWidths=[1.6 * inch, 4.6 * inch])
    table.setStyle(
        TableStyle(
            [
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.black),
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("INNERGRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                ("BOX", (0, 0), (-1, -1), 0.6, colors.lightgrey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f2f2f2")),
            ]
        )
    )
    elements.append(table)
    elements.append(Spacer(1, 0.25 * inch))

    if not matches:
        elements.append(Paragraph("No matches found.", body_style))
    else:
        elements.append(Paragraph("Matches", h2_style))
        elements.append(Spacer(1, 0.08 * inch))

    for idx, match in enumerate(matches, start=1):
        elements.append(
            Paragraph(
                f"{idx}. [{format_timestamp(match.start)} -&gt; {format_timestamp(match.end)}]",
                timestamp_style,
            )
        )
        context = context_around(words, match, context_words)
        elements.append(Paragraph(_highlight(context, match.text), context_style))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.build(elements)
    return output_path
