# File: backend/vbodegas/services/contract_layout.py
"""
Static geometry of the lease contract template.

One immutable ContractLayout holds everything the assembly engine needs:
    - form-field bindings (physical AcroForm name -> derived value key)
    - coordinate bindings (page, x, y in PDF user space, origin bottom-left)
    - row/column tables for the repeating anexos
    - the section map (section id -> template page indices)

Coordinates were calibrated against the 12-page template with the grid from
calibration_grid.py. A JSON file with the same shape can replace any part of
the default without touching code (see load_layout).
"""

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from vbodegas.services.contract_errors import LayoutError

logger = logging.getLogger(__name__)

ALIGNMENTS = ("left", "center", "right")


# ─── Bindings ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FormFieldBinding:
    """Write derived value ``value_key`` into the form field ``field_name``."""
    field_name: str
    value_key: str
    max_length: Optional[int] = None


@dataclass(frozen=True)
class CoordinateBinding:
    """Stamp a derived value at an absolute position on a template page."""
    name: str
    page: int
    x: float
    y: float
    size: float = 10
    max_width: Optional[float] = None
    align: str = "left"
    bold: bool = False
    clear: bool = False
    value_key: Optional[str] = None

    @property
    def key(self) -> str:
        return self.value_key or self.name


@dataclass(frozen=True)
class TableColumn:
    key: str
    x: float
    max_width: Optional[float] = None


@dataclass(frozen=True)
class TableBinding:
    """
    A repeating table on one page. Row ``i`` (1-based) of column ``col`` reads
    the derived value ``{name}_{i}_{col}`` and is stamped at
    (column.x, rows[i - 1]). Values past the last row are dropped.
    """
    name: str
    page: int
    rows: Tuple[float, ...]
    columns: Tuple[TableColumn, ...]
    size: float = 10
    clear: bool = False

    def cells(self) -> Iterator[CoordinateBinding]:
        for i, y in enumerate(self.rows, start=1):
            for col in self.columns:
                yield CoordinateBinding(
                    name=f"{self.name}_{i}_{col.key}",
                    page=self.page,
                    x=col.x,
                    y=y,
                    size=self.size,
                    max_width=col.max_width,
                    clear=self.clear,
                )


@dataclass(frozen=True)
class ContractLayout:
    form_fields: Tuple[FormFieldBinding, ...] = ()
    coordinates: Tuple[CoordinateBinding, ...] = ()
    tables: Tuple[TableBinding, ...] = ()
    sections: Mapping[str, Tuple[int, ...]] = field(default_factory=dict)

    def __post_init__(self):
        sections = {sid: tuple(pages) for sid, pages in dict(self.sections).items()}
        object.__setattr__(self, "form_fields", tuple(self.form_fields))
        object.__setattr__(self, "coordinates", tuple(self.coordinates))
        object.__setattr__(self, "tables", tuple(self.tables))
        object.__setattr__(self, "sections", MappingProxyType(sections))
        self._validate()

    def _validate(self) -> None:
        seen = set()
        for binding in self.stamp_bindings():
            if binding.name in seen:
                raise LayoutError(f"Duplicate coordinate binding '{binding.name}'")
            seen.add(binding.name)
            if binding.page < 0:
                raise LayoutError(f"Binding '{binding.name}' has negative page {binding.page}")
            if binding.size <= 0:
                raise LayoutError(f"Binding '{binding.name}' has non-positive size")
            if binding.max_width is not None and binding.max_width <= 0:
                raise LayoutError(f"Binding '{binding.name}' has non-positive max_width")
            if binding.align not in ALIGNMENTS:
                raise LayoutError(f"Binding '{binding.name}' has unknown align '{binding.align}'")

        for binding in self.form_fields:
            if binding.max_length is not None and binding.max_length < 0:
                raise LayoutError(f"Form field '{binding.field_name}' has negative max_length")

        for sid, pages in self.sections.items():
            if any(p < 0 for p in pages):
                raise LayoutError(f"Section '{sid}' has a negative page index")
            if any(b <= a for a, b in zip(pages, pages[1:])):
                raise LayoutError(f"Section '{sid}' pages must be strictly increasing: {list(pages)}")

    def stamp_bindings(self) -> Iterator[CoordinateBinding]:
        """Plain coordinate bindings followed by every table cell."""
        yield from self.coordinates
        for table in self.tables:
            yield from table.cells()

    def section_pages(self, section_id: str) -> Tuple[int, ...]:
        return self.sections.get(section_id, ())


# ─── Default contract geometry ──────────────────────────────────────────────

SECTION_IDS = ("contrato", "anexo1", "anexo2", "anexo3", "anexo4", "anexo5", "anexo6")

DEFAULT_SECTIONS: Dict[str, Tuple[int, ...]] = {
    "contrato": (0, 1, 2, 3, 4, 5),
    "anexo1": (6,),    # inventario de entrega
    "anexo2": (7,),    # personas autorizadas
    "anexo3": (8,),    # datos personales
    "anexo4": (9,),    # inventario de bienes
    "anexo5": (10,),   # prenda
    "anexo6": (11,),   # reglamento
}

# Physical slots for authorized persons in the fillable template.
AUTHORIZED_SLOTS = 3

DEFAULT_FORM_FIELDS: Tuple[FormFieldBinding, ...] = (
    # The client's name is repeated through the boilerplate of the contract.
    *(FormFieldBinding(f"NOMBRE#{i}", "nombre_completo") for i in range(13)),
    FormFieldBinding("NACIONALIDAD", "nacionalidad", 40),
    FormFieldBinding("OCUPACION", "ocupacion", 60),
    FormFieldBinding("DOMICILIO", "domicilio", 120),
    FormFieldBinding("TELEFONO", "telefono", 15),
    FormFieldBinding("CORREO", "email", 80),
    FormFieldBinding("RFC", "rfc", 13),
    FormFieldBinding("CURP", "curp", 18),
    FormFieldBinding("TIPO_IDENTIFICACION", "tipo_identificacion", 30),
    FormFieldBinding("NUMERO_IDENTIFICACION", "numero_identificacion", 20),
    FormFieldBinding("BIENES", "bienes_almacenar", 250),
    FormFieldBinding("MODULO", "modulo", 10),
    FormFieldBinding("BODEGA", "bodega_numero", 15),
    FormFieldBinding("PLANTA", "planta", 20),
    FormFieldBinding("SUPERFICIE", "metros", 10),
    FormFieldBinding("MEDIDAS", "medidas", 30),
    FormFieldBinding("FECHA_INICIO", "fecha_inicio_larga"),
    FormFieldBinding("FECHA_FIN", "fecha_fin_larga"),
    FormFieldBinding("DURACION", "duracion_meses", 3),
    FormFieldBinding("RENTA", "renta_mensual_letra"),
    FormFieldBinding("DEPOSITO", "deposito_letra"),
    FormFieldBinding("FECHA_FIRMA", "fecha_firma"),
    FormFieldBinding("FECHA_ENTREGA", "fecha_inicio_corta"),
    *(
        binding
        for i in range(1, AUTHORIZED_SLOTS + 1)
        for binding in (
            FormFieldBinding(f"AUT_FECHA_{i}", f"autorizado_{i}_fecha", 10),
            FormFieldBinding(f"AUT_NOMBRE_{i}", f"autorizado_{i}_nombre", 60),
            FormFieldBinding(f"AUT_TIPO_{i}", f"autorizado_{i}_tipo", 12),
        )
    ),
)

DEFAULT_COORDINATES: Tuple[CoordinateBinding, ...] = (
    # Cuerpo principal (página 1)
    CoordinateBinding("arrendatario_nombre", 0, 150, 580, 10, bold=True, value_key="nombre_completo"),
    CoordinateBinding("arrendatario_identificacion", 0, 150, 565, 10, value_key="identificacion"),
    CoordinateBinding("arrendatario_generales", 0, 72, 550, 9, max_width=450, value_key="generales"),
    CoordinateBinding("arrendatario_domicilio", 0, 72, 520, 9, max_width=450, value_key="domicilio"),
    CoordinateBinding("arrendatario_contacto", 0, 72, 490, 9, max_width=450, value_key="contacto"),
    CoordinateBinding("bienes_declaracion", 0, 72, 460, 9, max_width=450, value_key="bienes_almacenar"),

    # Cláusulas (página 2)
    CoordinateBinding("bodega_ident", 1, 200, 680, 10, bold=True),
    CoordinateBinding("bodega_superficie", 1, 200, 665, 10),
    CoordinateBinding("vigencia_inicio", 1, 200, 560, 10, bold=True, value_key="fecha_inicio_larga"),
    CoordinateBinding("vigencia_fin", 1, 350, 560, 10, bold=True, value_key="fecha_fin_larga"),

    # Pagos (páginas 3 y 4)
    CoordinateBinding("renta_mensual", 2, 200, 650, 10, max_width=330, bold=True, value_key="renta_mensual_letra"),
    CoordinateBinding("deposito_monto", 3, 200, 580, 10, max_width=330, bold=True, value_key="deposito_letra"),
    CoordinateBinding("banco_nombre", 2, 150, 400, 9),
    CoordinateBinding("banco_cuenta", 2, 150, 385, 9),
    CoordinateBinding("banco_clabe", 2, 150, 370, 9),

    # Firmas (página 6)
    CoordinateBinding("firma_fecha", 5, 400, 200, 10, value_key="fecha_firma"),
    CoordinateBinding("firma_arrendador", 5, 150, 150, 9, value_key="arrendador_nombre"),
    CoordinateBinding("firma_arrendatario", 5, 350, 150, 9, value_key="nombre_completo"),

    # Anexo 1 - inventario de entrega
    CoordinateBinding("anexo1_bodega", 6, 200, 650, 10, bold=True, value_key="bodega_ident"),
    CoordinateBinding("anexo1_superficie", 6, 200, 635, 10, value_key="bodega_superficie"),
    CoordinateBinding("anexo1_fecha_hora", 6, 200, 280, 9, value_key="fecha_inicio_corta"),

    # Anexo 3 - datos personales
    CoordinateBinding("anexo3_bodega", 8, 200, 600, 10, bold=True, value_key="bodega_ident"),

    # Anexo 5 - prenda
    CoordinateBinding("anexo5_bodega", 10, 200, 600, 10, bold=True, value_key="bodega_ident"),
    CoordinateBinding("anexo5_inicio", 10, 200, 580, 10, value_key="fecha_inicio_larga"),
    CoordinateBinding("anexo5_periodo", 10, 200, 560, 10, value_key="periodo"),

    # Anexo 6 - reglamento
    CoordinateBinding("anexo6_fecha", 11, 200, 680, 10, value_key="fecha_firma"),
)

DEFAULT_TABLES: Tuple[TableBinding, ...] = (
    # Anexo 2 - personas autorizadas
    TableBinding(
        name="autorizado",
        page=7,
        rows=(450, 430, 410),
        columns=(
            TableColumn("fecha", 90),
            TableColumn("nombre", 180, max_width=280),
            TableColumn("tipo", 470),
        ),
        size=9,
    ),
    # Anexo 4 - inventario de bienes
    TableBinding(
        name="inventario",
        page=9,
        rows=(480, 460, 440, 420, 400, 380, 360, 340),
        columns=(
            TableColumn("no", 90),
            TableColumn("cantidad", 140),
            TableColumn("descripcion", 200, max_width=260),
            TableColumn("valor", 480),
        ),
        size=9,
    ),
)

DEFAULT_LAYOUT = ContractLayout(
    form_fields=DEFAULT_FORM_FIELDS,
    coordinates=DEFAULT_COORDINATES,
    tables=DEFAULT_TABLES,
    sections=DEFAULT_SECTIONS,
)


# ─── JSON overrides ─────────────────────────────────────────────────────────

def _table_from_dict(raw: Dict[str, Any]) -> TableBinding:
    columns = tuple(TableColumn(**col) for col in raw.get("columns", []))
    return TableBinding(
        name=raw["name"],
        page=raw["page"],
        rows=tuple(raw.get("rows", [])),
        columns=columns,
        size=raw.get("size", 10),
        clear=raw.get("clear", False),
    )


def layout_from_dict(raw: Dict[str, Any], base: ContractLayout = DEFAULT_LAYOUT) -> ContractLayout:
    """
    Build a layout from a plain dict. Top-level keys that are absent keep the
    value from ``base``, so an override file may contain only "coordinates".
    """
    try:
        form_fields = (
            tuple(FormFieldBinding(**b) for b in raw["form_fields"])
            if "form_fields" in raw else base.form_fields
        )
        coordinates = (
            tuple(CoordinateBinding(**b) for b in raw["coordinates"])
            if "coordinates" in raw else base.coordinates
        )
        tables = (
            tuple(_table_from_dict(t) for t in raw["tables"])
            if "tables" in raw else base.tables
        )
        sections = (
            {sid: tuple(pages) for sid, pages in raw["sections"].items()}
            if "sections" in raw else dict(base.sections)
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise LayoutError(f"Malformed contract layout: {e}") from e

    return ContractLayout(
        form_fields=form_fields,
        coordinates=coordinates,
        tables=tables,
        sections=sections,
    )


def load_layout(path: Optional[str]) -> ContractLayout:
    """Load a JSON layout override; no path means the built-in default."""
    if not path:
        return DEFAULT_LAYOUT
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LayoutError(f"Cannot read contract layout {path}: {e}") from e
    if not isinstance(raw, dict):
        raise LayoutError(f"Contract layout {path} must be a JSON object")

    layout = layout_from_dict(raw)
    logger.info(
        f"[LAYOUT] Loaded {path}: {len(layout.form_fields)} form fields, "
        f"{len(layout.coordinates)} coordinates, {len(layout.tables)} tables, "
        f"{len(layout.sections)} sections"
    )
    return layout
