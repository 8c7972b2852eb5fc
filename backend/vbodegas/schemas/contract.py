from pydantic import BaseModel
from typing import Dict, List, Optional


class ContractRequest(BaseModel):
    """Body of generar-contrato. No sections (or an empty list) means the whole template."""
    secciones: Optional[List[str]] = None


class BodegaInfo(BaseModel):
    id: str
    number: Optional[str] = None
    planta: Optional[str] = None
    medidas: Optional[str] = None
    area_m2: Optional[float] = None

    class Config:
        from_attributes = True


class ContractDataResponse(BaseModel):
    ok: bool = True
    cliente_id: str
    nombre_completo: str
    bodega: Optional[BodegaInfo] = None
    valores: Dict[str, str]
    secciones: List[str]
