# File: backend/vbodegas/services/contract_values.py
"""
Lease record -> flat map of display-ready strings.

Every formatting rule lives here so both assembly strategies consume the same
values. Derivation never raises: missing or malformed input degrades to empty
strings / empty lists, and no wall-clock time is read, so the same record
always yields the same map.
"""

import calendar
import json
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from vbodegas.services.numero_letras import formatear_dinero_contrato, formatear_numero

logger = logging.getLogger(__name__)

MESES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

TIPOS_AUTORIZACION = {
    "temporal": "Temporal",
    "permanente": "Permanente",
}

# Datos fijos del arrendador
ARRENDADOR = {
    "arrendador_nombre": "PROYECTO Y ESPACIOS RADA, S. DE R.L. DE C.V.",
    "arrendador_representante": "FRANCISCA RODRÍGUEZ DE ANDA",
    "arrendador_rfc": "PER240816IU4",
    "arrendador_domicilio": (
        "Callejón Nacoa No. 29, Col. Guadalupe Victoria, Puerto Vallarta, Jalisco, CP. 48317"
    ),
    "banco_nombre": "BBVA Bancomer",
    "banco_cuenta": "No. de Cuenta: 0124918231",
    "banco_clabe": "CLABE Interbancaria: 0123 7500 1249 1823 17",
}


# ─── Lease data ─────────────────────────────────────────────────────────────

@dataclass
class AuthorizedPerson:
    fecha: str = ""
    nombre: str = ""
    tipo: str = "temporal"


@dataclass
class InventoryItem:
    no: str = ""
    cantidad: str = ""
    descripcion: str = ""
    valor: str = ""


@dataclass
class LeaseRecord:
    """A client's lease as read from the persistence layer."""
    id: str = ""
    nombre: str = ""
    apellidos: str = ""
    nacionalidad: str = ""
    actividad: str = ""
    direccion: str = ""
    telefono: str = ""
    email: str = ""
    rfc: str = ""
    curp: str = ""
    tipo_identificacion: str = ""
    numero_identificacion: str = ""
    bienes_almacenar: str = ""

    bodega_id: str = ""
    bodega: str = ""
    modulo: str = ""
    planta: str = ""
    metros: Optional[float] = None
    medidas: str = ""

    fecha_inicio: Optional[str] = None
    duracion_meses: Optional[int] = None
    fecha_expiracion: Optional[str] = None
    pago_mensual: Optional[float] = None
    deposito: Optional[float] = None

    autorizados: List[AuthorizedPerson] = field(default_factory=list)
    inventario: List[InventoryItem] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LeaseRecord":
        """Build a record from a DB row / request dict, tolerating missing keys and None."""

        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value).strip()

        def number(key: str) -> Optional[float]:
            value = data.get(key)
            if value in (None, ""):
                return None
            try:
                parsed = float(value)
            except (TypeError, ValueError):
                logger.warning(f"[VALUES] Ignoring non-numeric {key}={value!r}")
                return None
            if not math.isfinite(parsed):
                logger.warning(f"[VALUES] Ignoring non-finite {key}={value!r}")
                return None
            return parsed

        duracion = number("duracion_meses")
        return cls(
            id=text("id"),
            nombre=text("nombre"),
            apellidos=text("apellidos"),
            nacionalidad=text("nacionalidad"),
            actividad=text("actividad"),
            direccion=text("direccion"),
            telefono=text("telefono"),
            email=text("email"),
            rfc=text("rfc"),
            curp=text("curp"),
            tipo_identificacion=text("tipo_identificacion"),
            numero_identificacion=text("numero_identificacion"),
            bienes_almacenar=text("bienes_almacenar"),
            bodega_id=text("bodega_id"),
            bodega=text("bodega"),
            modulo=text("modulo"),
            planta=text("planta"),
            metros=number("metros"),
            medidas=text("medidas"),
            fecha_inicio=text("fecha_inicio") or None,
            duracion_meses=int(duracion) if duracion is not None else None,
            fecha_expiracion=text("fecha_expiracion") or None,
            pago_mensual=number("pago_mensual"),
            deposito=number("deposito"),
            autorizados=parse_authorized_persons(data.get("autorizados")),
            inventario=parse_inventory(data.get("inventario")),
        )


# ─── Defensive list parsing ─────────────────────────────────────────────────

def _load_list(source: Any, label: str) -> List[Any]:
    if source is None or source == "":
        return []
    if isinstance(source, (bytes, str)):
        try:
            source = json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"[VALUES] Malformed {label} JSON, using empty list: {e}")
            return []
    if not isinstance(source, (list, tuple)):
        logger.warning(f"[VALUES] Expected a list for {label}, got {type(source).__name__}")
        return []
    return list(source)


def _field(entry: Any, key: str) -> str:
    if isinstance(entry, Mapping):
        value = entry.get(key)
    else:
        value = getattr(entry, key, None)
    return "" if value is None else str(value).strip()


def parse_authorized_persons(source: Any) -> List[AuthorizedPerson]:
    """JSON text or list of dicts/AuthorizedPerson -> list; anything malformed -> []."""
    people = []
    for entry in _load_list(source, "autorizados"):
        person = AuthorizedPerson(
            fecha=_field(entry, "fecha"),
            nombre=_field(entry, "nombre"),
            tipo=_field(entry, "tipo").lower() or "temporal",
        )
        # The admin form always posts three rows, blank ones included.
        if person.nombre:
            people.append(person)
    return people


def parse_inventory(source: Any) -> List[InventoryItem]:
    items = []
    for entry in _load_list(source, "inventario"):
        item = InventoryItem(
            no=_field(entry, "no"),
            cantidad=_field(entry, "cantidad"),
            descripcion=_field(entry, "descripcion"),
            valor=_field(entry, "valor"),
        )
        if item.descripcion or item.cantidad:
            items.append(item)
    return items


# ─── Formatting helpers ─────────────────────────────────────────────────────

def parse_iso_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def fecha_larga(value: Any) -> str:
    """'2025-01-02' -> '02 de enero de 2025'; unparseable -> ''."""
    d = parse_iso_date(value)
    if d is None:
        return ""
    return f"{d.day:02d} de {MESES[d.month - 1]} de {d.year}"


def fecha_corta(value: Any) -> str:
    """'2025-01-02' -> '02/01/2025'; unparseable -> ''."""
    d = parse_iso_date(value)
    return d.strftime("%d/%m/%Y") if d else ""


def add_months(start: date, months: int) -> date:
    """Calendar-month addition, clamping the day (31 Jan + 1 -> 28/29 Feb)."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def end_date(record: LeaseRecord) -> Optional[date]:
    stored = parse_iso_date(record.fecha_expiracion)
    if stored:
        return stored
    start = parse_iso_date(record.fecha_inicio)
    if start and record.duracion_meses:
        try:
            return add_months(start, record.duracion_meses)
        except (ValueError, OverflowError):
            logger.warning(f"[VALUES] End date out of range: {start} + {record.duracion_meses} months")
    return None


def full_name(nombre: Optional[str], apellidos: Optional[str]) -> str:
    return f"{(nombre or '').strip()} {(apellidos or '').strip()}".strip()


def truncate(value: str, max_length: Optional[int]) -> str:
    """Hard cut, no ellipsis."""
    if max_length is None:
        return value
    return value[:max_length]


def _format_metros(metros: Optional[float]) -> str:
    if metros is None:
        return ""
    return f"{metros:g}"


def _join(*parts: str, sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)


# ─── Deriver ────────────────────────────────────────────────────────────────

def derive_contract_values(record: LeaseRecord) -> Dict[str, str]:
    """Flatten a LeaseRecord into the string map consumed by the assembly strategies."""
    nombre_completo = full_name(record.nombre, record.apellidos)
    fin = end_date(record)
    modulo = record.modulo or (record.bodega.split("-")[0] if record.bodega else "")
    metros = _format_metros(record.metros)
    duracion = str(record.duracion_meses) if record.duracion_meses else ""
    deposito = record.deposito if record.deposito is not None else record.pago_mensual
    rfc = (record.rfc or "").upper()
    curp = (record.curp or "").upper()

    values: Dict[str, str] = {
        "nombre": record.nombre,
        "apellidos": record.apellidos,
        "nombre_completo": nombre_completo,
        "nacionalidad": record.nacionalidad,
        "ocupacion": record.actividad,
        "domicilio": record.direccion,
        "telefono": record.telefono,
        "email": record.email,
        "rfc": rfc,
        "curp": curp,
        "tipo_identificacion": record.tipo_identificacion,
        "numero_identificacion": record.numero_identificacion,
        "identificacion": _join(record.tipo_identificacion, record.numero_identificacion, sep=" No. "),
        "generales": _join(
            record.nacionalidad,
            record.actividad,
            f"RFC {rfc}" if rfc else "",
            f"CURP {curp}" if curp else "",
        ),
        "contacto": _join(
            f"Tel. {record.telefono}" if record.telefono else "",
            f"correo {record.email}" if record.email else "",
        ),
        "bienes_almacenar": record.bienes_almacenar,

        "bodega_numero": record.bodega,
        "modulo": modulo,
        "planta": record.planta,
        "metros": metros,
        "medidas": record.medidas,
        "bodega_ident": f"Módulo {modulo} No. {record.bodega}" if record.bodega else "",
        "bodega_superficie": (
            f"{metros} metros cuadrados" + (f" ({record.medidas})" if record.medidas else "")
            if metros else ""
        ),

        "fecha_inicio_larga": fecha_larga(record.fecha_inicio),
        "fecha_inicio_corta": fecha_corta(record.fecha_inicio),
        "fecha_fin_larga": fecha_larga(fin),
        "fecha_fin_corta": fecha_corta(fin),
        "fecha_firma": fecha_larga(record.fecha_inicio),
        "duracion_meses": duracion,
        "periodo": f"{duracion} {'mes' if duracion == '1' else 'meses'}" if duracion else "",

        "renta_mensual": formatear_numero(record.pago_mensual) if record.pago_mensual is not None else "",
        "renta_mensual_letra": (
            formatear_dinero_contrato(record.pago_mensual) if record.pago_mensual is not None else ""
        ),
        "deposito": formatear_numero(deposito) if deposito is not None else "",
        "deposito_letra": formatear_dinero_contrato(deposito) if deposito is not None else "",
    }
    values.update(ARRENDADOR)

    for i, person in enumerate(record.autorizados, start=1):
        values[f"autorizado_{i}_fecha"] = fecha_corta(person.fecha) or person.fecha
        values[f"autorizado_{i}_nombre"] = person.nombre
        values[f"autorizado_{i}_tipo"] = TIPOS_AUTORIZACION.get(person.tipo, person.tipo.capitalize())

    for i, item in enumerate(record.inventario, start=1):
        values[f"inventario_{i}_no"] = item.no or str(i)
        values[f"inventario_{i}_cantidad"] = item.cantidad
        values[f"inventario_{i}_descripcion"] = item.descripcion
        values[f"inventario_{i}_valor"] = item.valor

    return values
