# File: backend/vbodegas/services/contract_pdf.py
"""
Contract document assembly with PyMuPDF.

Two strategies produce the same output from the same lease record:
1. Form fields: write each bound AcroForm text field and lock it read-only
2. Coordinates: stamp text at fixed (page, x, y) positions, word-wrapped

Either way the result can be cut down to the selected contract sections by
copying their pages (widget values included) into a new document.

All positions in ContractLayout are PDF user space (origin bottom-left);
PyMuPDF works top-left, so y is flipped against the page height here.
"""

import fitz  # PyMuPDF
import logging
import os
import re
import time
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from vbodegas.services.contract_errors import SectionSelectionError, TemplateError
from vbodegas.services.contract_layout import (
    DEFAULT_LAYOUT,
    ContractLayout,
    CoordinateBinding,
    FormFieldBinding,
)
from vbodegas.services.contract_values import LeaseRecord, derive_contract_values, truncate

logger = logging.getLogger(__name__)

STAMP_FONT = "tiro"        # Times-Roman
STAMP_FONT_BOLD = "tibo"   # Times-Bold
STAMP_COLOR = (0, 0, 0)
LINE_GAP = 3
CLEAR_PADDING = 2

STRATEGIES = ("auto", "form", "coordinates")


# ─── Data classes ───────────────────────────────────────────────────────────

class FillOutcome(Enum):
    FILLED = "filled"
    MISSING = "missing"         # no field with that name in the template
    WRONG_TYPE = "wrong_type"   # field exists but is not a text field


@dataclass
class AssemblyRequest:
    record: LeaseRecord
    sections: Optional[List[str]] = None   # None = every template page
    strategy: str = "auto"
    filename: Optional[str] = None   # None = derived from client + sections + time


@dataclass
class GeneratedDocument:
    content: bytes
    filename: str
    page_count: int = 0


# ─── Template loading ───────────────────────────────────────────────────────

def open_template(template_path: str) -> fitz.Document:
    """Open a fresh in-memory copy of the template. Every failure is a TemplateError."""
    if not template_path or not os.path.isfile(template_path):
        raise TemplateError(f"Contract template not found: {template_path}")
    try:
        doc = fitz.open(template_path, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise TemplateError(f"Cannot read contract template {template_path}: {e}") from e

    if not doc.is_pdf or doc.page_count == 0:
        doc.close()
        raise TemplateError(f"Contract template {template_path} is not a usable PDF")
    return doc


def has_form_fields(doc: fitz.Document) -> bool:
    return bool(doc.is_form_pdf)


# ─── Form-field strategy ────────────────────────────────────────────────────

def _index_widgets(pages: Iterable[fitz.Page]) -> Dict[str, List[fitz.Widget]]:
    fields: Dict[str, List[fitz.Widget]] = {}
    for page in pages:
        for widget in page.widgets():
            fields.setdefault(widget.field_name, []).append(widget)
    return fields


def set_form_field(fields: Mapping[str, List[fitz.Widget]], name: str, value: str) -> FillOutcome:
    """Write ``value`` into every widget of field ``name`` and mark it read-only."""
    widgets = fields.get(name)
    if not widgets:
        logger.warning(f"[FORM] Field '{name}' not found in template, skipping")
        return FillOutcome.MISSING

    if any(w.field_type != fitz.PDF_WIDGET_TYPE_TEXT for w in widgets):
        logger.warning(
            f"[FORM] Field '{name}' is a {widgets[0].field_type_string} field, not text, skipping"
        )
        return FillOutcome.WRONG_TYPE

    for widget in widgets:
        widget.field_value = value
        widget.update()
        # Lock only after the value is in; read-only fields refuse edits
        widget.field_flags |= fitz.PDF_FIELD_IS_READ_ONLY
        widget.update()
    return FillOutcome.FILLED


def fill_form_fields(
    doc: fitz.Document,
    values: Mapping[str, str],
    bindings: Sequence[FormFieldBinding],
) -> Dict[str, FillOutcome]:
    """
    Apply bindings in declaration order. When two bindings target the same
    physical field the later one wins, both for the field text and for the
    reported outcome.
    """
    # Widgets hold a weak reference to their page, so the pages must outlive them.
    pages = list(doc)
    fields = _index_widgets(pages)

    outcomes: Dict[str, FillOutcome] = {}
    for binding in bindings:
        value = truncate(values.get(binding.value_key) or "", binding.max_length)
        outcomes[binding.field_name] = set_form_field(fields, binding.field_name, value)

    filled = sum(1 for o in outcomes.values() if o is FillOutcome.FILLED)
    logger.info(f"[FORM] Filled {filled}/{len(outcomes)} fields")
    return outcomes


# ─── Page subsetting ────────────────────────────────────────────────────────

def resolve_section_pages(sections: Iterable[str], layout: ContractLayout) -> List[int]:
    """Union of the sections' pages, ascending, without duplicates. Unknown ids add nothing."""
    pages = set()
    for section_id in sections:
        section_pages = layout.section_pages(section_id)
        if not section_pages:
            logger.warning(f"[SUBSET] Unknown or empty section '{section_id}' ignored")
        pages.update(section_pages)
    return sorted(pages)


def subset_sections(
    doc: fitz.Document,
    sections: Optional[Sequence[str]],
    layout: ContractLayout = DEFAULT_LAYOUT,
) -> fitz.Document:
    """
    Copy the pages of the selected sections into a new document.

    No selection returns ``doc`` itself. A selection that names sections but
    resolves to no existing page raises SectionSelectionError.
    """
    if not sections:
        return doc

    pages = resolve_section_pages(sections, layout)
    in_range = [p for p in pages if p < doc.page_count]
    if len(in_range) < len(pages):
        logger.warning(
            f"[SUBSET] Pages {[p for p in pages if p >= doc.page_count]} are beyond the "
            f"template's {doc.page_count} pages, ignored"
        )
    if not in_range:
        raise SectionSelectionError(
            f"Selected sections {list(sections)} do not match any template page"
        )

    subset = fitz.open()
    for i, page_index in enumerate(in_range):
        subset.insert_pdf(
            doc,
            from_page=page_index,
            to_page=page_index,
            final=1 if i == len(in_range) - 1 else 0,
        )
    logger.info(f"[SUBSET] {list(sections)} -> pages {in_range}")
    return subset


# ─── Coordinate strategy ────────────────────────────────────────────────────

def measure_text(text: str, size: float, bold: bool = False) -> float:
    return fitz.get_text_length(text, fontname=STAMP_FONT_BOLD if bold else STAMP_FONT, fontsize=size)


def wrap_words(text: str, max_width: Optional[float], measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap. A word wider than ``max_width`` on its own still gets a
    line of its own, so every word of ``text`` appears exactly once.
    """
    if max_width is None or measure(text) <= max_width:
        return [text]

    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _line_x(binding: CoordinateBinding, width: float) -> float:
    if binding.align == "center":
        return binding.x - width / 2
    if binding.align == "right":
        return binding.x - width
    return binding.x


def stamp_text(page: fitz.Page, text: str, binding: CoordinateBinding, clear: bool = False) -> int:
    """Draw ``text`` at the binding's position. Returns the number of lines written."""
    size = binding.size
    measure = lambda s: measure_text(s, size, binding.bold)  # noqa: E731
    lines = wrap_words(text, binding.max_width, measure)
    widths = [measure(line) for line in lines]
    baseline = page.rect.height - binding.y
    step = size + LINE_GAP

    if clear or binding.clear:
        box_width = max([binding.max_width or 0] + widths) + 2 * CLEAR_PADDING
        left = _line_x(binding, box_width - 2 * CLEAR_PADDING) - CLEAR_PADDING
        top = baseline - size - CLEAR_PADDING
        bottom = baseline + (len(lines) - 1) * step + size * 0.3 + CLEAR_PADDING
        page.draw_rect(fitz.Rect(left, top, left + box_width, bottom), color=None, fill=(1, 1, 1), width=0)

    fontname = STAMP_FONT_BOLD if binding.bold else STAMP_FONT
    for i, (line, width) in enumerate(zip(lines, widths)):
        page.insert_text(
            fitz.Point(_line_x(binding, width), baseline + i * step),
            line,
            fontsize=size,
            fontname=fontname,
            color=STAMP_COLOR,
        )
    return len(lines)


def stamp_coordinates(
    doc: fitz.Document,
    values: Mapping[str, str],
    layout: ContractLayout = DEFAULT_LAYOUT,
    clear_all: bool = False,
) -> int:
    """Stamp every plain and table binding that has a value. Returns bindings drawn."""
    stamped = 0
    for binding in layout.stamp_bindings():
        value = values.get(binding.key)
        if not value:
            continue
        if binding.page >= doc.page_count:
            logger.warning(
                f"[STAMP] '{binding.name}' targets page {binding.page}, template has "
                f"{doc.page_count}; skipped"
            )
            continue
        stamp_text(doc[binding.page], value, binding, clear=clear_all)
        stamped += 1

    logger.info(f"[STAMP] Stamped {stamped} values")
    return stamped


# ─── Orchestration ──────────────────────────────────────────────────────────

def _slug(text: str) -> str:
    # ASCII only: the name ends up in a Content-Disposition header
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^A-Za-z0-9-]+", "_", ascii_text).strip("_")
    return slug or "cliente"


def contract_filename(
    record: LeaseRecord,
    sections: Optional[Sequence[str]] = None,
    timestamp_ms: Optional[int] = None,
) -> str:
    """Contrato_<cliente>_<secciones|completo>_<ms>.pdf"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    tag = "-".join(sections) if sections else "completo"
    name = _slug(f"{record.nombre} {record.apellidos}")
    return f"Contrato_{name}_{_slug(tag)}_{timestamp_ms}.pdf"


def resolve_strategy(doc: fitz.Document, strategy: str) -> str:
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown contract strategy '{strategy}', expected one of {STRATEGIES}")
    if strategy == "auto":
        return "form" if has_form_fields(doc) else "coordinates"
    return strategy


def build_contract(
    request: AssemblyRequest,
    template_path: str,
    layout: ContractLayout = DEFAULT_LAYOUT,
) -> GeneratedDocument:
    """Run one assembly request against a fresh copy of the template."""
    values = derive_contract_values(request.record)
    doc = open_template(template_path)
    try:
        strategy = resolve_strategy(doc, request.strategy)
        logger.info(
            f"[CONTRACT] Client {request.record.id or '?'}: strategy={strategy}, "
            f"sections={request.sections or 'all'}"
        )

        if strategy == "form":
            fill_form_fields(doc, values, layout.form_fields)
        else:
            stamp_coordinates(doc, values, layout)

        result = subset_sections(doc, request.sections, layout)
        try:
            content = result.tobytes(garbage=3, deflate=True)
            page_count = result.page_count
        finally:
            if result is not doc:
                result.close()
    finally:
        doc.close()

    filename = request.filename or contract_filename(request.record, request.sections)
    logger.info(f"[CONTRACT] Generated {filename}: {page_count} pages, {len(content)} bytes")
    return GeneratedDocument(content=content, filename=filename, page_count=page_count)


def generate_contract(
    lease_record: Union[LeaseRecord, Mapping],
    template_path: str,
    output_path: Optional[str],
    selected_sections: Optional[Sequence[str]] = None,
    strategy: str = "auto",
    layout: ContractLayout = DEFAULT_LAYOUT,
    filename: Optional[str] = None,
) -> bytes:
    """
    Generate the contract PDF and return its bytes.

    ``output_path`` (optional) receives a copy only after serialization
    succeeded, so a broken template never leaves a partial file behind.
    ``filename`` names the document in the log; it defaults to the basename
    of ``output_path``.
    """
    record = lease_record if isinstance(lease_record, LeaseRecord) else LeaseRecord.from_mapping(lease_record)
    request = AssemblyRequest(
        record=record,
        sections=list(selected_sections) if selected_sections else None,
        strategy=strategy,
        filename=filename or (os.path.basename(output_path) if output_path else None),
    )
    document = build_contract(request, template_path, layout)

    if output_path:
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(document.content)
        logger.info(f"[CONTRACT] Saved {output_path}")

    return document.content
