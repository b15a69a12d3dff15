from typing import List

from pydantic_settings import BaseSettings

from volume_forge.models.specs import FillMode


class Settings(BaseSettings):
    environment: str = "dev"
    log_level: str = "INFO"

    # Budget
    total_size_gb: float = 1.0
    default_file_name: str = "placeholder.bin"

    # Content
    fill_mode: FillMode = FillMode.ZERO
    source_urls: List[str] = []
    fetch_timeout_seconds: float = 30.0
    fetch_workers: int = 4

    # Writing
    max_workers: int = 1
    chunk_size_bytes: int = 8 * 1024 * 1024
    dry_run: bool = False

    # Telemetry
    event_log_path: str | None = None

    class Config:
        env_prefix = "VOLUME_FORGE_"
        env_file = ".env"
