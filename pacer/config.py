from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of pacer folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'pacer.db'}"
    sql_echo: bool = False
    
    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"
    
    class Config:
        env_file = str(PROJECT_ROOT / ".env")

settings = Settings()
