"""Word export for generated documents.

Office staff often finish a voucher or manual in Word, so every generated
text document can also be downloaded as .docx. Lines are written one
paragraph each; a leading 'Label:' is set in bold like the printed vouchers.
"""
import logging
import re
from io import BytesIO

from docx import Document
from docx.shared import Pt, RGBColor

logger = logging.getLogger(__name__)

COLOR_GRAY = RGBColor(0x74, 0x74, 0x74)
COLOR_DARK = RGBColor(0x22, 0x22, 0x22)

LABEL_RE = re.compile(r"^([A-Z][\w /&'-]{0,40}:)(.*)$")


def add_line(document, line: str):
    """Add one text line as a paragraph, bolding a leading label."""
    p = document.add_paragraph()
    match = LABEL_RE.match(line)
    if match:
        run = p.add_run(match.group(1))
        run.bold = True
        run.font.color.rgb = COLOR_GRAY
        rest = match.group(2)
    else:
        rest = line
    if rest:
        run = p.add_run(rest)
        run.font.color.rgb = COLOR_GRAY
    return p


def text_to_docx(text: str, title: str = "") -> bytes:
    """Convert a generated text document to .docx bytes."""
    document = Document()

    if title:
        p = document.add_paragraph()
        run = p.add_run(title)
        run.bold = True
        run.font.size = Pt(14)
        run.font.color.rgb = COLOR_DARK

    lines = text.split("\n")
    for line in lines:
        add_line(document, line.replace("\t", "    "))

    buffer = BytesIO()
    document.save(buffer)
    logger.info(f"Converted document '{title}' to docx ({len(lines)} lines)")
    return buffer.getvalue()
