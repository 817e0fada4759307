from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class WorkerSettings(BaseSettings):
    orch_url: str = "http://localhost:4000"
    tenant_id: str = "default-tenant"
    poll_interval_ms: int = Field(default=2000, ge=0)
    work_delay_ms: int = Field(default=2000, ge=0)

    # HTTP policy for every orchestrator call
    request_timeout_sec: float = Field(default=5.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay_sec: float = Field(default=0.1, ge=0)
    retry_jitter_sec: float = Field(default=0.05, ge=0)

    max_concurrency: int = Field(default=1, ge=1)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    @property
    def poll_interval_sec(self) -> float:
        return self.poll_interval_ms / 1000.0

    @property
    def work_delay_sec(self) -> float:
        return self.work_delay_ms / 1000.0
