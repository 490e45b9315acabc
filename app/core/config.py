"""
Application settings read from environment variables.
"""
import os


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Settings:
    """Runtime configuration for the irrigation planner."""

    def __init__(self):
        self.DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./irrigation_planner.db")
        self.RUNS_STORAGE_KEY = os.environ.get("RUNS_STORAGE_KEY", "wm_runs")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
        self.CHART_WIDTH = _int_env("CHART_WIDTH", 640)
        self.CHART_HEIGHT = _int_env("CHART_HEIGHT", 280)


settings = Settings()
