"""
Section selection: resolving section ids to template pages and copying them.

Run: pytest backend/tests/test_page_subset.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pdf_helpers import page_markers, widget_values
from vbodegas.services.contract_errors import SectionSelectionError
from vbodegas.services.contract_layout import DEFAULT_LAYOUT, ContractLayout
from vbodegas.services.contract_pdf import (
    fill_form_fields,
    open_template,
    resolve_section_pages,
    subset_sections,
)
from vbodegas.services.contract_values import derive_contract_values


@pytest.fixture
def doc(form_template):
    document = open_template(form_template)
    yield document
    document.close()


class TestResolveSectionPages:

    def test_union_sorted_deduplicated(self):
        pages = resolve_section_pages(["anexo2", "contrato", "anexo2"], DEFAULT_LAYOUT)
        assert pages == [0, 1, 2, 3, 4, 5, 7]

    def test_order_of_ids_does_not_matter(self):
        a = resolve_section_pages(["anexo6", "anexo1"], DEFAULT_LAYOUT)
        b = resolve_section_pages(["anexo1", "anexo6"], DEFAULT_LAYOUT)
        assert a == b == [6, 11]

    def test_unknown_ids_contribute_nothing(self):
        assert resolve_section_pages(["desconocido", "anexo3"], DEFAULT_LAYOUT) == [8]
        assert resolve_section_pages(["desconocido"], DEFAULT_LAYOUT) == []


class TestSubsetSections:

    @pytest.mark.parametrize("sections", [None, []])
    def test_no_selection_returns_original(self, doc, sections):
        assert subset_sections(doc, sections, DEFAULT_LAYOUT) is doc
        assert doc.page_count == 12

    def test_contract_only(self, doc):
        subset = subset_sections(doc, ["contrato"], DEFAULT_LAYOUT)
        assert subset.page_count == 6
        assert page_markers(subset) == [f"PAGINA {i}" for i in range(1, 7)]

    def test_pages_kept_in_template_order(self, doc):
        subset = subset_sections(doc, ["anexo4", "anexo1", "anexo4"], DEFAULT_LAYOUT)
        assert page_markers(subset) == ["PAGINA 7", "PAGINA 10"]

    def test_unknown_plus_known(self, doc):
        subset = subset_sections(doc, ["nada", "anexo5"], DEFAULT_LAYOUT)
        assert page_markers(subset) == ["PAGINA 11"]

    def test_only_unknown_is_an_error(self, doc):
        with pytest.raises(SectionSelectionError):
            subset_sections(doc, ["nada"], DEFAULT_LAYOUT)

    def test_pages_beyond_template_are_an_error(self, doc):
        layout = ContractLayout(sections={"extra": (40, 41)})
        with pytest.raises(SectionSelectionError):
            subset_sections(doc, ["extra"], layout)

    def test_partially_out_of_range_keeps_the_rest(self, doc):
        layout = ContractLayout(sections={"mixto": (2, 40)})
        subset = subset_sections(doc, ["mixto"], layout)
        assert page_markers(subset) == ["PAGINA 3"]

    def test_filled_values_survive_the_copy(self, doc, lease_record):
        fill_form_fields(doc, derive_contract_values(lease_record), DEFAULT_LAYOUT.form_fields)
        subset = subset_sections(doc, ["contrato", "anexo2"], DEFAULT_LAYOUT)
        values = widget_values(subset)
        assert values["RENTA"] == "$15,000.00 (QUINCE MIL PESOS 00/100 M.N.)"
        assert values["AUT_NOMBRE_3"] == "María Ruiz"
        # anexo 1 was not selected
        assert "FECHA_ENTREGA" not in values
