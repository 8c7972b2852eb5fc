"""
Contract endpoints through the FastAPI app, against an in-memory SQLite database.

Run: pytest backend/tests/test_contracts_api.py -v
"""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import fitz
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pdf_helpers import widget_values
from vbodegas.core.auth import create_access_token
from vbodegas.core.config import settings
from vbodegas.db import models
from vbodegas.db.database import Base, get_db
from vbodegas.main import app


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db = TestingSessionLocal()
    db.add(models.Bodega(id="b-1", number="A-101", planta="baja", medidas="3x3", area_m2=9))
    db.add(models.Cliente(
        id="cli-1",
        nombre="Juan",
        apellidos="Pérez López",
        email="juan@example.com",
        bodega_id="b-1",
        fecha_inicio="2025-01-01",
        duracion_meses=12,
        pago_mensual=15000,
        autorizados=json.dumps([
            {"fecha": "2025-01-01", "nombre": "Ana Pérez", "tipo": "permanente"},
            {"fecha": "2025-01-02", "nombre": "Luis Gómez", "tipo": "temporal"},
        ]),
        inventario="esto no es json",
    ))
    db.commit()
    db.close()

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestingSessionLocal
    app.dependency_overrides.pop(get_db, None)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session, form_template, monkeypatch):
    monkeypatch.setattr(settings, "CONTRACT_TEMPLATE_PATH", form_template)
    monkeypatch.setattr(settings, "CONTRACT_STRATEGY", "auto")
    return TestClient(app)


def auth(rol: str = "admin") -> dict:
    return {"Authorization": f"Bearer {create_access_token(f'{rol}@vbodegas.com', rol)}"}


class TestGenerarContrato:

    def test_contract_section_pdf(self, client, db_session):
        response = client.post(
            "/api/admin/clientes/cli-1/generar-contrato",
            json={"secciones": ["contrato"]},
            headers=auth("editor"),
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="Contrato_Juan_Perez_Lopez_contrato_')

        doc = fitz.open(stream=response.content, filetype="pdf")
        assert doc.page_count == 6
        values = widget_values(doc)
        assert values["RENTA"] == "$15,000.00 (QUINCE MIL PESOS 00/100 M.N.)"
        assert values["BODEGA"] == "A-101"

    def test_audit_event_recorded(self, client, db_session):
        client.post("/api/admin/clientes/cli-1/generar-contrato", json={}, headers=auth())
        db = db_session()
        try:
            log = db.query(models.ActivityLog).filter(models.ActivityLog.type == "contrato_generado").one()
            payload = json.loads(log.payload)
            assert log.user == "admin@vbodegas.com"
            assert payload["clienteId"] == "cli-1"
            assert payload["bodegaId"] == "b-1"
            assert payload["secciones"] == "todas"
        finally:
            db.close()

    def test_no_body_means_full_contract(self, client):
        response = client.post("/api/admin/clientes/cli-1/generar-contrato", headers=auth())
        assert response.status_code == 200
        assert fitz.open(stream=response.content, filetype="pdf").page_count == 12

    def test_output_copy_written(self, client):
        response = client.post("/api/admin/clientes/cli-1/generar-contrato", headers=auth())
        filename = response.headers["content-disposition"].split('filename="')[1].rstrip('"')
        assert os.path.isfile(os.path.join(settings.CONTRACT_OUTPUT_DIR, filename))

    def test_unknown_client(self, client):
        response = client.post("/api/admin/clientes/nadie/generar-contrato", headers=auth())
        assert response.status_code == 404

    def test_selection_without_pages(self, client):
        response = client.post(
            "/api/admin/clientes/cli-1/generar-contrato",
            json={"secciones": ["anexo99"]},
            headers=auth(),
        )
        assert response.status_code == 400

    def test_missing_template(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "CONTRACT_TEMPLATE_PATH", str(tmp_path / "no_existe.pdf"))
        response = client.post("/api/admin/clientes/cli-1/generar-contrato", headers=auth())
        assert response.status_code == 500
        assert "template" in response.json()["detail"]

    @pytest.mark.parametrize("rol", ["viewer", "cliente"])
    def test_forbidden_roles(self, client, rol):
        response = client.post("/api/admin/clientes/cli-1/generar-contrato", headers=auth(rol))
        assert response.status_code == 403

    def test_requires_token(self, client):
        assert client.post("/api/admin/clientes/cli-1/generar-contrato").status_code == 401

    def test_bad_token(self, client):
        response = client.post(
            "/api/admin/clientes/cli-1/generar-contrato",
            headers={"Authorization": "Bearer no.es.token"},
        )
        assert response.status_code == 401


class TestObtenerContrato:

    def test_viewer_reads_values(self, client):
        response = client.get("/api/admin/clientes/cli-1/contrato", headers=auth("viewer"))
        assert response.status_code == 200
        data = response.json()
        assert data["nombre_completo"] == "Juan Pérez López"
        assert data["bodega"]["number"] == "A-101"
        assert data["valores"]["renta_mensual_letra"] == "$15,000.00 (QUINCE MIL PESOS 00/100 M.N.)"
        assert data["valores"]["autorizado_2_nombre"] == "Luis Gómez"
        # malformed inventory JSON degrades to no rows
        assert "inventario_1_descripcion" not in data["valores"]
        assert data["secciones"][0] == "contrato"

    def test_unit_data_fills_blanks(self, client):
        data = client.get("/api/admin/clientes/cli-1/contrato", headers=auth()).json()
        assert data["valores"]["planta"] == "baja"
        assert data["valores"]["medidas"] == "3x3"
        assert data["valores"]["metros"] == "9"

    def test_unknown_client(self, client):
        assert client.get("/api/admin/clientes/nadie/contrato", headers=auth()).status_code == 404


class TestCoordsGrid:

    def test_grid_pdf(self, client):
        response = client.get("/api/admin/contratos/coords-grid?step=50", headers=auth())
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        doc = fitz.open(stream=response.content, filetype="pdf")
        assert doc.page_count == 12
        assert "Página 1" in doc[0].get_text()

    def test_bad_step(self, client):
        response = client.get("/api/admin/contratos/coords-grid?step=0", headers=auth())
        assert response.status_code == 400

    def test_viewer_forbidden(self, client):
        response = client.get("/api/admin/contratos/coords-grid", headers=auth("viewer"))
        assert response.status_code == 403
