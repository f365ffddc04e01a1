# powerup_api/settings.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict, Field
import base64
from typing import List, Optional
from pathlib import Path


class Settings(BaseSettings):
    # Storage settings
    # Default to JSON files; override via .env (STORAGE_BACKEND=sqlite / sheets / memory)
    storage_backend: str = "json"
    data_dir: str = "data"
    db_url: str = "sqlite:///data/powerup.db"
    google_sa_json: str = ""
    google_sa_json_base64: str = ""
    sheets_spreadsheet_id: str = ""
    sheets_tab_name: str = "records"

    # Serialize read-modify-write cycles per (project, namespace).
    # False reproduces the extension's lost-update behaviour.
    serialize_writes: bool = True

    # CORS settings
    allowed_origins: str = "chrome-extension://*,http://localhost:3000"

    log_level: str = "INFO"

    # Search / cache behaviour
    search_result_limit: int = Field(default=50, ge=1)
    recents_limit: int = Field(default=5, ge=1)
    taxonomy_max_depth: int = Field(default=5, ge=0)

    # Headless scans against the host application
    procore_base_url: str = "https://app.procore.com"
    scan_page_limit: int = 100
    scan_max_consecutive_errors: int = 3
    scan_timeout_seconds: float = 30.0
    scan_cookie: Optional[str] = Field(
        default=None,
        description="Cookie header forwarded on scans when the caller does not send one",
    )

    model_config = ConfigDict(
        # Always load .env from the same folder as this settings.py
        env_file=str(Path(__file__).resolve().parent / ".env"),
        extra="ignore",
    )

    def resolved_google_sa_json(self) -> str:
        """
        Return the service account JSON for the Sheets backend.
        If GOOGLE_SA_JSON_BASE64 is set, decode it to inline JSON.
        Otherwise return GOOGLE_SA_JSON (path or inline JSON).
        """
        if self.google_sa_json_base64:
            return base64.b64decode(self.google_sa_json_base64).decode("utf-8")
        return self.google_sa_json

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None

def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
