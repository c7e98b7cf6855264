"""PDF summary report.

The document is modelled as an object graph (catalog, page tree, one page
and one content stream per page, one shared font) and written by a two-pass
serializer: the first pass renders every object declaration to bytes and
derives its offset, the second concatenates them and appends the
cross-reference table.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple
from .summary import SummaryEntry, entry_lines

MEDIA_TYPE = "application/pdf"

TOP_Y = 780
LINE_HEIGHT = 18
BOTTOM_MARGIN = 60
LEFT_X = 50
FONT_SIZE = 12
PAGE_SIZE = (612, 792)

HEADER = b"%PDF-1.4\n"
ENCODING = "latin-1"

_NEWLINES = re.compile(r"[\r\n\t]+")
_SPECIALS = re.compile(r"[()\\]")

@dataclass(frozen=True)
class PlacedLine:
	text: str
	y: int

@dataclass(frozen=True)
class PdfObject:
	number: int
	body: bytes

	def declaration(self) -> bytes:
		return b"%d 0 obj\n" % self.number + self.body + b"\nendobj\n"

@dataclass(frozen=True)
class ReportDocument:
	objects: Tuple[PdfObject, ...]
	page_numbers: Tuple[int, ...]
	font_number: int
	root_number: int = 1

def escape_text(line: str) -> str:
	collapsed = _NEWLINES.sub(" ", line)
	return _SPECIALS.sub(lambda m: "\\" + m.group(0), collapsed)

def paginate(lines: Sequence[str]) -> List[List[PlacedLine]]:
	pages: List[List[PlacedLine]] = []
	current: List[PlacedLine] = []
	y = TOP_Y
	for line in lines:
		if y < BOTTOM_MARGIN:
			pages.append(current)
			current = []
			y = TOP_Y
		current.append(PlacedLine(text=line, y=y))
		y -= LINE_HEIGHT
	if current:
		pages.append(current)
	if not pages:
		pages.append([PlacedLine(text=" ", y=TOP_Y)])
	return pages

def _content_stream(lines: Iterable[PlacedLine]) -> bytes:
	commands = "\n".join(
		f"BT /F1 {FONT_SIZE} Tf {LEFT_X} {line.y} Td ({line.text}) Tj ET" for line in lines
	)
	return commands.encode(ENCODING, errors="replace")

def build_document(pages: Sequence[Sequence[PlacedLine]]) -> ReportDocument:
	page_numbers = tuple(3 + idx * 2 for idx in range(len(pages)))
	font_number = 3 + len(pages) * 2
	kids = " ".join(f"{num} 0 R" for num in page_numbers)
	objects = [
		PdfObject(1, b"<< /Type /Catalog /Pages 2 0 R >>"),
		PdfObject(2, f"<< /Type /Pages /Count {len(pages)} /Kids [{kids}] >>".encode(ENCODING)),
	]
	width, height = PAGE_SIZE
	for page_number, lines in zip(page_numbers, pages):
		content_number = page_number + 1
		page = (
			f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {width} {height}] /Contents {content_number} 0 R "
			f"/Resources << /Font << /F1 {font_number} 0 R >> >> >>"
		)
		stream = _content_stream(lines)
		objects.append(PdfObject(page_number, page.encode(ENCODING)))
		objects.append(PdfObject(content_number, b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"))
	objects.append(PdfObject(font_number, b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>"))
	return ReportDocument(objects=tuple(objects), page_numbers=page_numbers, font_number=font_number)

def layout(document: ReportDocument) -> Tuple[List[bytes], List[int], int]:
	"""First pass: object declarations, their offsets and the xref offset."""
	declarations: List[bytes] = []
	offsets: List[int] = []
	position = len(HEADER)
	for obj in sorted(document.objects, key=lambda o: o.number):
		chunk = obj.declaration()
		declarations.append(chunk)
		offsets.append(position)
		position += len(chunk)
	return declarations, offsets, position

def serialize(document: ReportDocument) -> bytes:
	declarations, offsets, xref_offset = layout(document)
	size = len(offsets) + 1
	xref = [b"xref\n", b"0 %d\n" % size, b"0000000000 65535 f \n"]
	xref.extend(b"%010d 00000 n \n" % offset for offset in offsets)
	trailer = b"trailer << /Size %d /Root %d 0 R >>\nstartxref\n%d\n%%%%EOF" % (size, document.root_number, xref_offset)
	return HEADER + b"".join(declarations) + b"".join(xref) + trailer

def report_lines(entries: Sequence[SummaryEntry], *, title: Optional[str] = None, generated_at: Optional[datetime] = None) -> List[str]:
	lines: List[str] = []
	if title:
		moment = generated_at or datetime.now(timezone.utc)
		lines.extend([title, f"Generated: {moment.strftime('%Y-%m-%d %H:%M:%S')}", ""])
	for entry in entries:
		lines.extend(entry_lines(entry, plain=True))
	return lines

def render_pdf(lines: Sequence[str]) -> bytes:
	pages = paginate([escape_text(line) for line in lines])
	return serialize(build_document(pages))

def synthesize_report(entries: Sequence[SummaryEntry], *, title: Optional[str] = None, generated_at: Optional[datetime] = None) -> bytes:
	return render_pdf(report_lines(entries, title=title, generated_at=generated_at))

def report_filename(now: Optional[datetime] = None) -> str:
	moment = now or datetime.now(timezone.utc)
	return f"quiz-summary-{int(moment.timestamp() * 1000)}.pdf"
