from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    debug: bool = False

    # Planner settings
    planner_provider: str = "gemini"  # gemini | anthropic | openai | ollama
    planner_model: str = "gemini-2.5-flash"
    gemini_api_key: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # Simulation settings
    sim_tick_hz: float = 10.0
    sim_seed: int | None = None
    broadcast_every_ticks: int = 1

    # Operator journal
    log_capacity: int = 50

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
