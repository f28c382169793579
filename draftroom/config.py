# config.py – Chargement des paramètres via pydantic-settings

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DB_URL: str = "sqlite:///data/draftroom.db"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Catalogue champions (Data Dragon)
    SEED_CHAMPIONS: bool = True  # seed au démarrage si la table est vide
    DDRAGON_BASE_URL: str = "https://ddragon.leagueoflegends.com"
    DDRAGON_LOCALE: str = "en_US"

    # HTTP
    CORS_ORIGINS: str = "*"  # liste séparée par des virgules

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

settings = Settings()
