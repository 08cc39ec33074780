from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tikky import __version__


class Settings(BaseSettings):
    service_name: str = "tikky-api"
    version: str = __version__
    env: str = "development"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8080
    shutdown_timeout: int = 5

    counter_key: str = "counter"

    redis_addr: str = "localhost:6379"
    redis_password: str | None = None
    redis_db: int = 0
    redis_pool_size: int = 20
    redis_socket_timeout: float = 3.0
    redis_connect_timeout: float = 3.0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    @model_validator(mode="after")
    def validate_redis_settings(self) -> "Settings":
        host, sep, port = self.redis_addr.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError("REDIS_ADDR must be in host:port form")
        if self.redis_pool_size < 1:
            raise ValueError("REDIS_POOL_SIZE must be at least 1")
        return self

    @property
    def redis_host(self) -> str:
        return self.redis_addr.rpartition(":")[0]

    @property
    def redis_port(self) -> int:
        return int(self.redis_addr.rpartition(":")[2])


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
