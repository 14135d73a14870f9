# src/ioc_kernel/config/base_settings.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class KernelSettings(BaseSettings):
    """
    Container settings, read from IOC_* environment variables or .env.
    Applications can subclass and extend it.
    """

    # comma separated module/package names scanned for @resolves providers;
    # empty means every module already imported
    discovery_modules: str = ""
    strict_discovery: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="IOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def discovery_module_names(self) -> List[str]:
        return [m.strip() for m in self.discovery_modules.split(",") if m.strip()]
