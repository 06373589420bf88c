from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AR_",
    )

    # Attribution
    risk_free_rate_pct: float = 6.5  # India 10yr G-sec ~6.5%
    trading_days_per_year: int = 252

    # Monte Carlo simulation
    simulation_count: int = 10000
    simulation_batch_size: int = 2500
    simulation_seed: int | None = None

    # Parallelization
    simulation_parallel_threshold: int = 10000
    simulation_max_workers: int = 4

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"
