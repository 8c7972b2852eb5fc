# File: backend/vbodegas/api/endpoints/contracts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from functools import lru_cache
from typing import Optional
import logging

from vbodegas.core.auth import CurrentUser, READ_ROLES, WRITE_ROLES, require_roles
from vbodegas.core.config import settings
from vbodegas.db.database import get_db
from vbodegas.schemas.contract import BodegaInfo, ContractDataResponse, ContractRequest
from vbodegas.services.activity import broadcast_log
from vbodegas.services.calibration_grid import calibration_grid_bytes
from vbodegas.services.contract_errors import ContractError
from vbodegas.services.contract_layout import SECTION_IDS, ContractLayout, load_layout
from vbodegas.services.contract_pdf import contract_filename, generate_contract
from vbodegas.services.contract_values import derive_contract_values
from vbodegas.services.leases import get_cliente, get_lease_record_by_id
from vbodegas.services.storage import contract_output_path

router = APIRouter()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_contract_layout() -> ContractLayout:
    """Layout is loaded once per process; restart to pick up a new override file."""
    return load_layout(settings.CONTRACT_LAYOUT_PATH or None)


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/clientes/{cliente_id}/generar-contrato")
def generar_contrato(
    cliente_id: str,
    request: Optional[ContractRequest] = None,
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
    layout: ContractLayout = Depends(get_contract_layout),
    db: Session = Depends(get_db),
):
    """Generate the lease contract PDF for a client, optionally only some sections."""
    try:
        record = get_lease_record_by_id(db, cliente_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")

        secciones = request.secciones if request and request.secciones else None
        filename = contract_filename(record, secciones)
        content = generate_contract(
            record,
            settings.CONTRACT_TEMPLATE_PATH,
            contract_output_path(filename),
            selected_sections=secciones,
            strategy=settings.CONTRACT_STRATEGY,
            layout=layout,
            filename=filename,
        )

        broadcast_log(
            db,
            "contrato_generado",
            clienteId=cliente_id,
            bodegaId=record.bodega_id or None,
            secciones=secciones or "todas",
            archivo=filename,
            user=current_user.email,
        )
        return _pdf_response(content, filename)

    except HTTPException:
        raise
    except ContractError as e:
        logger.error(f"Contract generation failed for client {cliente_id}: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating contract for client {cliente_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error generando contrato")


@router.get("/clientes/{cliente_id}/contrato", response_model=ContractDataResponse)
def obtener_contrato(
    cliente_id: str,
    current_user: CurrentUser = Depends(require_roles(*READ_ROLES)),
    layout: ContractLayout = Depends(get_contract_layout),
    db: Session = Depends(get_db),
):
    """The values a generated contract would contain, without rendering it."""
    try:
        cliente = get_cliente(db, cliente_id)
        if cliente is None:
            raise HTTPException(status_code=404, detail="Cliente no encontrado")

        record = get_lease_record_by_id(db, cliente_id)
        values = derive_contract_values(record)
        return ContractDataResponse(
            cliente_id=cliente.id,
            nombre_completo=values["nombre_completo"],
            bodega=BodegaInfo.model_validate(cliente.bodega) if cliente.bodega else None,
            valores=values,
            secciones=[sid for sid in SECTION_IDS if layout.section_pages(sid)],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error reading contract data for client {cliente_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error obteniendo contrato")


@router.get("/contratos/coords-grid")
def coords_grid(
    step: Optional[float] = Query(None, description="Grid spacing in PDF points"),
    current_user: CurrentUser = Depends(require_roles(*WRITE_ROLES)),
):
    """Calibration grid over the contract template, for reading off coordinates."""
    try:
        content = calibration_grid_bytes(
            settings.CONTRACT_TEMPLATE_PATH,
            step if step is not None else settings.CALIBRATION_STEP,
        )
        return _pdf_response(content, "grid_calibracion.pdf")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContractError as e:
        logger.error(f"Calibration grid failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
