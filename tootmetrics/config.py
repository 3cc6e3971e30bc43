from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)
    db_path: str = Field(default="./data/tootmetrics.db", alias="DB_PATH")
    default_timeframe: str = Field(default="last30days", alias="DEFAULT_TIMEFRAME")
    csv_delimiter: str = Field(default=";", alias="CSV_DELIMITER")

settings = Settings()
