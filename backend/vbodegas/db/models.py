# File: backend/vbodegas/db/models.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vbodegas.db.database import Base

class Bodega(Base):
    __tablename__ = "bodegas"

    id = Column(String, primary_key=True, index=True)
    number = Column(String)          # "A-101"
    planta = Column(String)          # "baja" / "alta"
    medidas = Column(String, nullable=True)
    area_m2 = Column(Numeric(10, 2), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    status = Column(String, default="disponible")
    sort_order = Column(Integer, nullable=True)

    clientes = relationship("Cliente", back_populates="bodega")

class Cliente(Base):
    __tablename__ = "clientes"

    id = Column(String, primary_key=True, index=True)
    nombre = Column(String)
    apellidos = Column(String, nullable=True)
    email = Column(String, unique=True, index=True)
    telefono = Column(String, nullable=True)
    nacionalidad = Column(String, nullable=True)
    actividad = Column(String, nullable=True)
    direccion = Column(Text, nullable=True)
    rfc = Column(String, nullable=True)
    curp = Column(String, nullable=True)
    tipo_identificacion = Column(String, nullable=True)
    numero_identificacion = Column(String, nullable=True)
    bienes_almacenar = Column(Text, nullable=True)

    bodega_id = Column(String, ForeignKey("bodegas.id"), nullable=True)
    modulo = Column(String, nullable=True)
    planta = Column(String, nullable=True)
    medidas = Column(String, nullable=True)
    metros = Column(Numeric(10, 2), nullable=True)
    fecha_inicio = Column(String, nullable=True)       # ISO date
    duracion_meses = Column(Integer, default=1)
    fecha_expiracion = Column(String, nullable=True)   # ISO date
    pago_mensual = Column(Numeric(10, 2), default=0)
    deposito = Column(Numeric(10, 2), nullable=True)
    estado_contrato = Column(String, default="activo")

    autorizados = Column(Text, nullable=True)  # JSON list of {fecha, nombre, tipo}
    inventario = Column(Text, nullable=True)   # JSON list of {no, cantidad, descripcion, valor}

    bodega = relationship("Bodega", back_populates="clientes")

class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, index=True)   # "contrato_generado", ...
    user = Column(String, nullable=True)
    payload = Column(Text, nullable=True)  # JSON
    created_at = Column(DateTime(timezone=True), server_default=func.now())
