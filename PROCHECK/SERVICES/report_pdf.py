# Руководство к файлу (SERVICES/report_pdf.py)
# Назначение:
# - Сборка PDF-версии отчёта по проверке из его текстового документа (reportlab).
# - Первая строка текста становится заголовком, остальные строки становятся абзацами.
# Важно:
# - Для кириллицы нужен TTF-шрифт DejaVuSans; если его нет в системе, используется Helvetica.

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer


logger = logging.getLogger("procheck.reports")

FONT_CANDIDATES: Dict[str, List[str]] = {
    "DejaVuSans": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/local/share/fonts/DejaVuSans.ttf",
    ],
    "DejaVuSans-Bold": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/local/share/fonts/DejaVuSans-Bold.ttf",
    ],
}


def _register_fonts() -> Tuple[str, str]:
    """Вернуть (обычный, жирный) шрифт, зарегистрировав DejaVu при наличии."""

    registered = set(pdfmetrics.getRegisteredFontNames())
    for name, paths in FONT_CANDIDATES.items():
        if name in registered:
            continue
        for p in paths:
            fp = Path(p)
            if not fp.exists():
                continue
            try:
                pdfmetrics.registerFont(TTFont(name, str(fp)))
            except (OSError, TTFError) as exc:
                logger.warning("Font %s at %s is unusable: %s", name, fp, exc)
                continue
            registered.add(name)
            break

    regular = "DejaVuSans" if "DejaVuSans" in registered else "Helvetica"
    bold = "DejaVuSans-Bold" if "DejaVuSans-Bold" in registered else "Helvetica-Bold"
    return regular, bold


def render_report_pdf(text: str, *, title: str = "Отчёт по проверке") -> bytes:
    font_regular, font_bold = _register_fonts()

    ss = getSampleStyleSheet()
    style_title = ParagraphStyle("report_title", parent=ss["Heading1"], fontSize=16, spaceAfter=8, fontName=font_bold)
    style_p = ParagraphStyle(
        "report_text", parent=ss["BodyText"], fontSize=10, leading=14, spaceAfter=2, fontName=font_regular
    )

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=title,
    )

    lines = text.splitlines()
    story: List = []
    heading = lines[0].strip() if lines else title
    story.append(Paragraph(escape(heading or title), style_title))
    for line in lines[1:]:
        if line.strip():
            story.append(Paragraph(escape(line.strip()), style_p))
        else:
            story.append(Spacer(1, 6))

    doc.build(story)
    return buffer.getvalue()
