# File: backend/vbodegas/services/leases.py
"""Read side of the lease data: DB rows -> LeaseRecord."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from vbodegas.db import models
from vbodegas.services.contract_values import LeaseRecord

logger = logging.getLogger(__name__)


def lease_mapping(cliente: models.Cliente) -> Dict[str, Any]:
    """Flatten a client row and its unit into the keys LeaseRecord.from_mapping reads."""
    bodega = cliente.bodega
    return {
        "id": cliente.id,
        "nombre": cliente.nombre,
        "apellidos": cliente.apellidos,
        "nacionalidad": cliente.nacionalidad,
        "actividad": cliente.actividad,
        "direccion": cliente.direccion,
        "telefono": cliente.telefono,
        "email": cliente.email,
        "rfc": cliente.rfc,
        "curp": cliente.curp,
        "tipo_identificacion": cliente.tipo_identificacion,
        "numero_identificacion": cliente.numero_identificacion,
        "bienes_almacenar": cliente.bienes_almacenar,
        "bodega_id": cliente.bodega_id,
        "bodega": bodega.number if bodega else None,
        "modulo": cliente.modulo,
        # The unit's own data wins only when the client row leaves it blank
        "planta": cliente.planta or (bodega.planta if bodega else None),
        "metros": cliente.metros if cliente.metros is not None else (bodega.area_m2 if bodega else None),
        "medidas": cliente.medidas or (bodega.medidas if bodega else None),
        "fecha_inicio": cliente.fecha_inicio,
        "duracion_meses": cliente.duracion_meses,
        "fecha_expiracion": cliente.fecha_expiracion,
        "pago_mensual": cliente.pago_mensual,
        "deposito": cliente.deposito,
        "autorizados": cliente.autorizados,
        "inventario": cliente.inventario,
    }


def get_cliente(db: Session, cliente_id: str) -> Optional[models.Cliente]:
    return db.query(models.Cliente).filter(models.Cliente.id == cliente_id).first()


def get_lease_record_by_id(db: Session, cliente_id: str) -> Optional[LeaseRecord]:
    cliente = get_cliente(db, cliente_id)
    if cliente is None:
        logger.info(f"[LEASE] Client {cliente_id} not found")
        return None
    if cliente.bodega_id and cliente.bodega is None:
        logger.warning(f"[LEASE] Client {cliente_id} points to missing unit {cliente.bodega_id}")
    return LeaseRecord.from_mapping(lease_mapping(cliente))
