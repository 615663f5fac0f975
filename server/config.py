import os
import logging
from pathlib import Path
from typing import List
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load from .env.dev for local development
current_file_path = Path(__file__).resolve()
root_dir = current_file_path.parent.parent
env_path = root_dir / ".env.dev"

if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=True)
else:
    load_dotenv()

DEFAULT_ORIGINS = "http://localhost,http://localhost:3000,http://localhost:8001"


class ServerConfig:
    def __init__(self) -> None:
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reminders.db")
        self.CRON_SECRET = os.getenv("CRON_SECRET")
        self.VAPID_PUBLIC = os.getenv("VAPID_PUBLIC")
        self.CORS_ORIGINS: List[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS).split(",")
            if origin.strip()
        ]


config = ServerConfig()
