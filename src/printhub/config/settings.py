"""
Centralized settings and path configuration for PrintHub.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Record files
    pricing_rules_csv: Path
    bindings_json: Path
    orders_json: Path
    users_json: Path

    log_level: str = "INFO"

    # Uploads
    max_upload_bytes: int = 100 * 1024 * 1024
    supported_extensions: tuple = ('pdf', 'docx', 'pptx', 'jpg', 'jpeg', 'png')

    # Largest page count a quote or order may declare
    max_pages: int = 9999

    # API
    cors_origins: tuple = ('*',)

    # Sign-in codes are echoed in the send-otp response (development only)
    otp_debug: bool = False

    # Presentation
    currency_symbol: str = "₹"
    order_id_prefix: str = "PH"

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()
        data = Path(data_dir or os.environ.get('PRINTHUB_DATA_DIR') or root / 'data')

        origins = os.environ.get('PRINTHUB_CORS_ORIGINS', '*')

        return cls(
            project_root=root,
            data_dir=data,
            pricing_rules_csv=data / 'pricing_rules.csv',
            bindings_json=data / 'binding_types.json',
            orders_json=data / 'orders.json',
            users_json=data / 'users.json',
            log_level=os.environ.get('PRINTHUB_LOG_LEVEL', 'INFO').upper(),
            cors_origins=tuple(o.strip() for o in origins.split(',') if o.strip()),
            otp_debug=os.environ.get('PRINTHUB_OTP_DEBUG') == '1',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
