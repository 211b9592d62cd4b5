# questengine/core/settings.py
# Configuration centralisée (variables d'environnement / .env) du moteur de missions.

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from rich import print


class Settings(BaseSettings):
    # === App settings ===
    app_name: str = "QuestEngine"
    environment: str = "development"  # or "production"

    # === MongoDB ===
    mongodb_user: str = ""
    mongodb_password: str = ""
    mongodb_uri_tpl: str = "mongodb://localhost:27017"
    mongodb_db: str = "questengine"

    # === QUIZ ===
    # Clé partagée pour chiffrer les solutions envoyées au client
    quiz_secret_key: str = "change-me"
    solution_delimiter: str = ","
    max_points_per_question: float = 10.0
    points_decay_divisor: float = 125.0

    # === MISSIONS ===
    package_filename: str = "package.json"
    default_points_required: int = 100

    # === LOGS ===
    logs_dir: str = "logs"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def mongodb_uri(self) -> str:
        """Build the full MongoDB URI from template."""
        return self.mongodb_uri_tpl.replace("[[MONGODB_USER]]", self.mongodb_user)\
                                   .replace("[[MONGODB_PASSWORD]]", self.mongodb_password)


@lru_cache
def get_settings() -> Settings:
    """Retourne l'instance de configuration (chargée une seule fois).

    Description:
        Lit l'environnement et le fichier `.env` au premier appel, puis renvoie
        toujours la même instance. Utiliser `get_settings.cache_clear()` dans les
        tests pour recharger après modification de l'environnement.

    Returns:
        Settings: Configuration courante.
    """
    settings = Settings()
    if settings.environment == "development":
        print("--- Settings loaded ---")
    return settings
