"""Configuration management for drbdflex."""

import uuid
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """drbdflex configuration settings."""

    # General settings
    app_name: str = "drbdflex"
    debug: bool = False
    log_level: str = "INFO"

    # DRBD Manage settings
    drbdmanage_bin: str = "drbdmanage"
    assign_retries: int = Field(default=5, ge=1)
    unassign_retries: int = Field(default=3, ge=1)
    device_path_retries: int = Field(default=3, ge=1)
    poll_interval: float = Field(default=1.0, ge=0)  # seconds between checks
    device_poll_interval: float = Field(default=2.0, ge=0)
    recovery_settle: float = Field(default=2.0, ge=0)  # sleep after resume-all

    # Provisioner settings
    provisioner_name: str = "linbit/drbdmanage-flex"
    provisioner_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    driver: str = "linbit/drbdmanage-flexvolume"
    default_fs_type: Literal["ext2", "ext3", "ext4", "xfs", "btrfs"] = "ext4"
    default_redundancy: str = "2"
    read_only: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {
        "env_prefix": "DRBDFLEX_",
        "env_file": ".env",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
