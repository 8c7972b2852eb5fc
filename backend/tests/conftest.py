"""
Shared fixtures: synthetic contract templates built with PyMuPDF and a
ready-made lease record. Nothing here touches the real template or database.
"""

import os
import sys
import tempfile

# Configure before any vbodegas import reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CONTRACT_OUTPUT_DIR"] = tempfile.mkdtemp(prefix="vbodegas-contratos-")
os.environ["SECRET_KEY"] = "test-secret"
os.environ.pop("DEV_MODE", None)
os.environ.pop("CONTRACT_LAYOUT_PATH", None)

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from pdf_helpers import build_template
from vbodegas.services.contract_values import LeaseRecord


@pytest.fixture
def form_template(tmp_path):
    return build_template(str(tmp_path / "template_form.pdf"), with_fields=True, extra_checkbox="ACEPTA")


@pytest.fixture
def plain_template(tmp_path):
    return build_template(str(tmp_path / "template_plain.pdf"), with_fields=False)


@pytest.fixture
def lease_data():
    return {
        "id": "cli-1",
        "nombre": "Juan",
        "apellidos": "Pérez López",
        "nacionalidad": "Mexicana",
        "actividad": "Comerciante",
        "direccion": "Av. México 123, Puerto Vallarta, Jalisco",
        "telefono": "3221234567",
        "email": "juan@example.com",
        "rfc": "pelj800101abc",
        "curp": "pelj800101hjcrpn09",
        "tipo_identificacion": "INE",
        "numero_identificacion": "1234567890",
        "bienes_almacenar": "Muebles y cajas",
        "bodega_id": "b-1",
        "bodega": "A-101",
        "planta": "baja",
        "metros": 9,
        "medidas": "3x3",
        "fecha_inicio": "2025-01-01",
        "duracion_meses": 12,
        "pago_mensual": 15000,
        "autorizados": [
            {"fecha": "2025-01-01", "nombre": "Ana Pérez", "tipo": "permanente"},
            {"fecha": "2025-01-02", "nombre": "Luis Gómez", "tipo": "temporal"},
            {"fecha": "2025-01-03", "nombre": "María Ruiz", "tipo": "temporal"},
            {"fecha": "2025-01-04", "nombre": "Pedro Díaz", "tipo": "temporal"},
            {"fecha": "2025-01-05", "nombre": "Sofía Cruz", "tipo": "permanente"},
        ],
        "inventario": [
            {"no": "1", "cantidad": "4", "descripcion": "Sillas de madera", "valor": "2,000"},
            {"no": "2", "cantidad": "1", "descripcion": "Refrigerador", "valor": "8,500"},
        ],
    }


@pytest.fixture
def lease_record(lease_data):
    return LeaseRecord.from_mapping(lease_data)
