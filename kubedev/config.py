from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KUBEDEV_")

    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    # Namespace used when the dev manifest does not name one
    k8s_default_namespace: str = "default"

    # Upper bound (seconds) for every call made to the Kubernetes API
    k8s_request_timeout: float = 30.0

    # Optimistic concurrency: attempts for a read-mutate-write cycle that
    # keeps losing against concurrent writers (HTTP 409 on update)
    k8s_conflict_retries: int = 5
    k8s_conflict_min_wait: float = 0.1  # seconds
    k8s_conflict_max_wait: float = 2.0  # seconds

    # Local state for the file synchronization daemon (pid files)
    sync_home: str = "~/.kubedev"

    # Default dev manifest path for the CLI
    dev_manifest: str = "kubedev.yml"


@lru_cache()
def get_settings():
    return Settings()
