# File: backend/vbodegas/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings:
    PROJECT_NAME: str = "VBodegas API"
    PROJECT_VERSION: str = "0.1.0"

    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(BACKEND_DIR, 'vbodegas.db')}")

    # Security settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "insecure-default-secret-key-for-dev-only")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

    # Contract generation
    CONTRACT_TEMPLATE_PATH: str = os.getenv(
        "CONTRACT_TEMPLATE_PATH", os.path.join(BACKEND_DIR, "templates", "contrato_template.pdf")
    )
    CONTRACT_OUTPUT_DIR: str = os.getenv("CONTRACT_OUTPUT_DIR", os.path.join(BACKEND_DIR, "contratos"))
    # Optional JSON file replacing (parts of) the built-in coordinate/section layout
    CONTRACT_LAYOUT_PATH: str = os.getenv("CONTRACT_LAYOUT_PATH", "")
    CONTRACT_STRATEGY: str = os.getenv("CONTRACT_STRATEGY", "auto")  # auto | form | coordinates
    CALIBRATION_STEP: int = int(os.getenv("CALIBRATION_STEP", "20"))

    # CORS settings
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

settings = Settings()
