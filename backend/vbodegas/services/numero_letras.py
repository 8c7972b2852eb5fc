# File: backend/vbodegas/services/numero_letras.py
"""
Spanish number-to-words conversion for contract amounts.

Amounts are written in upper case the way Mexican lease contracts spell them:
    15000     -> "QUINCE MIL"
    15000.5   -> "$15,000.50 (QUINCE MIL PESOS 50/100 M.N.)"
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

logger = logging.getLogger(__name__)

UNIDADES = ["", "UN", "DOS", "TRES", "CUATRO", "CINCO", "SEIS", "SIETE", "OCHO", "NUEVE"]
DECENAS = ["", "", "VEINTE", "TREINTA", "CUARENTA", "CINCUENTA", "SESENTA", "SETENTA", "OCHENTA", "NOVENTA"]
ESPECIALES = [
    "DIEZ", "ONCE", "DOCE", "TRECE", "CATORCE", "QUINCE",
    "DIECISÉIS", "DIECISIETE", "DIECIOCHO", "DIECINUEVE",
]
CENTENAS = [
    "", "CIENTO", "DOSCIENTOS", "TRESCIENTOS", "CUATROCIENTOS", "QUINIENTOS",
    "SEISCIENTOS", "SETECIENTOS", "OCHOCIENTOS", "NOVECIENTOS",
]


def _menor_mil(num: int) -> str:
    """Spell 0..999. Zero is the empty string so callers can concatenate."""
    if num == 0:
        return ""
    if num == 100:
        return "CIEN"

    centena, resto = divmod(num, 100)
    decena, unidad = divmod(resto, 10)
    parts = []

    if centena:
        parts.append(CENTENAS[centena])

    if 10 <= resto < 20:
        parts.append(ESPECIALES[resto - 10])
    elif decena == 2 and unidad:
        parts.append("VEINTI" + UNIDADES[unidad])
    elif decena and unidad:
        parts.append(f"{DECENAS[decena]} Y {UNIDADES[unidad]}")
    elif decena:
        parts.append(DECENAS[decena])
    elif unidad:
        parts.append(UNIDADES[unidad])

    return " ".join(parts)


def numero_a_letras(numero: Any) -> str:
    """
    Spell the integer part of ``numero`` in Spanish upper case.

    Fractions are truncated (cents are always rendered numerically by
    ``formatear_dinero_contrato``). Negative input raises ValueError.
    """
    entero = int(numero)
    if entero < 0:
        raise ValueError(f"Cannot spell negative amount: {numero}")
    if entero == 0:
        return "CERO"

    millones, resto_millones = divmod(entero, 1_000_000)
    miles, unidades = divmod(resto_millones, 1000)
    parts = []

    if millones:
        if millones == 1:
            parts.append("UN MILLÓN")
        elif millones < 1000:
            parts.append(f"{_menor_mil(millones)} MILLONES")
        else:
            parts.append(f"{numero_a_letras(millones)} MILLONES")

    if miles:
        parts.append("MIL" if miles == 1 else f"{_menor_mil(miles)} MIL")

    if unidades:
        parts.append(_menor_mil(unidades))

    return " ".join(parts).strip()


def _to_decimal(monto: Any) -> Decimal:
    if isinstance(monto, str):
        monto = monto.replace("$", "").replace(",", "").strip()
    return Decimal(str(monto)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def formatear_numero(monto: Any) -> str:
    """Plain amount with thousands separators: 15000 -> '15,000.00'. Bad input -> ''."""
    try:
        return f"{_to_decimal(monto):,.2f}"
    except (InvalidOperation, ValueError, TypeError):
        return ""


def formatear_dinero_contrato(monto: Any) -> str:
    """
    Amount as written in contract clauses:
        15000 -> "$15,000.00 (QUINCE MIL PESOS 00/100 M.N.)"
    Non-numeric or negative input yields an empty string.
    """
    try:
        valor = _to_decimal(monto)
        letras = numero_a_letras(valor)
    except (InvalidOperation, ValueError, TypeError) as e:
        logger.debug(f"[MONEY] Cannot format amount {monto!r}: {e}")
        return ""

    centavos = int((valor - int(valor)) * 100)
    return f"${valor:,.2f} ({letras} PESOS {centavos:02d}/100 M.N.)"
