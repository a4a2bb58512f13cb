from dataclasses import dataclass
from pathlib import Path
import os


DEFAULT_DEPARTMENTS = (
    "Administration",
    "Cutting",
    "Finishing",
    "Human Resources",
    "Maintenance",
    "Packing",
    "Quality Control",
    "Sewing",
    "Stores",
)


@dataclass(frozen=True)
class Settings:
    app_name: str = "Garment HR Records"
    api_version: str = "v1"
    secret_key: str = os.getenv("GARMENT_HR_SECRET_KEY", "change-me-for-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))
    data_dir: Path = Path(
        os.getenv("GARMENT_HR_DATA_DIR", str(Path(__file__).resolve().parents[2] / "data"))
    )
    password_min_length: int = 6
    username_min_length: int = 3
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))
    default_admin_username: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    default_admin_password: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    departments: tuple[str, ...] = DEFAULT_DEPARTMENTS

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / "audit.jsonl"


settings = Settings()
settings.data_dir.mkdir(parents=True, exist_ok=True)
