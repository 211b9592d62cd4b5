"""Configuration du système de logging centralisé."""

import json
import logging
import logging.handlers
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional
import os
import glob

from bson import ObjectId

from questengine.core.settings import get_settings


class CustomJSONEncoder(json.JSONEncoder):
    """Encodeur JSON personnalisé pour gérer ObjectId et datetime."""

    def default(self, obj):
        if isinstance(obj, ObjectId):
            return str(obj)
        elif isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class DataLogger:
    """Logger spécialisé pour les résultats de missions en JSON."""

    def __init__(self, logs_dir: str = "logs"):
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def log_data(
        self,
        calling_context: str,
        data: Dict[str, Any],
        user_data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Ajoute une entrée au fichier JSON du jour.

        Description:
            Le fichier `<date>-data.json` est maintenu comme un tableau JSON valide :
            le crochet fermant est retiré, l'entrée ajoutée, puis le tableau refermé.

        Args:
            calling_context (str): Origine de l'entrée (ex. "mission.close").
            data (dict): Données à tracer.
            user_data (dict | None): Identité de l'utilisateur concerné.
        """
        today = datetime.now().strftime("%Y-%m-%d")
        json_file = self.logs_dir / f"{today}-data.json"

        entry = {
            "datetime": datetime.now().isoformat(),
            "calling_context": calling_context,
            "user_data": user_data or {},
            "data": data
        }

        if json_file.exists():
            with open(json_file, "r", encoding="utf-8") as f:
                content = f.read().rstrip()

            if content.endswith(']'):
                content = content[:-1]
                if content.rstrip().endswith('}'):
                    content += ','

            with open(json_file, "w", encoding="utf-8") as f:
                f.write(content)
                f.write(json.dumps(entry, cls=CustomJSONEncoder))
                f.write(']')
        else:
            with open(json_file, "w", encoding="utf-8") as f:
                f.write('[')
                f.write(json.dumps(entry, cls=CustomJSONEncoder))
                f.write(']')


def _rotating_handler(filename: Path, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=filename,
        when="midnight",
        interval=1,
        encoding="utf-8"
    )
    handler.suffix = "%Y-%m-%d"
    handler.setFormatter(formatter)
    return handler


def setup_logging(logs_dir: Optional[str] = None) -> tuple[logging.Logger, logging.Logger, DataLogger]:
    """Configure le système de logging avec rotation quotidienne.

    Args:
        logs_dir (str | None): Dossier des logs (défaut : `Settings.logs_dir`).

    Returns:
        tuple: (logger_generic, logger_errors, data_logger)
    """
    settings = get_settings()
    logs_path = Path(logs_dir or settings.logs_dir)
    logs_path.mkdir(parents=True, exist_ok=True)

    cleanup_old_logs(logs_path, retention_days=settings.log_retention_days)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Logger générique (INFO+)
    generic_logger = logging.getLogger("questengine.generic")
    generic_logger.setLevel(logging.INFO)
    if not generic_logger.handlers:  # Éviter les doublons
        generic_logger.addHandler(_rotating_handler(logs_path / "generic.log", formatter))

    # Logger erreurs (ERROR+)
    error_logger = logging.getLogger("questengine.errors")
    error_logger.setLevel(logging.ERROR)
    if not error_logger.handlers:
        error_logger.addHandler(_rotating_handler(logs_path / "errors.log", formatter))

    data_logger = DataLogger(str(logs_path))

    return generic_logger, error_logger, data_logger


def cleanup_old_logs(logs_dir: Path, retention_days: int = 30) -> None:
    """Supprime les logs plus anciens que retention_days."""
    cutoff_str = (datetime.now() - timedelta(days=retention_days)).strftime("%Y-%m-%d")

    patterns = [
        f"{logs_dir}/*-data.json",
        f"{logs_dir}/generic.log.*",
        f"{logs_dir}/errors.log.*"
    ]

    for pattern in patterns:
        for file_path in glob.glob(pattern):
            file_name = os.path.basename(file_path)
            # La date est soit en préfixe (data.json), soit en suffixe de rotation
            date_part = file_name[:10] if file_name.endswith("-data.json") else file_name[-10:]
            try:
                datetime.strptime(date_part, "%Y-%m-%d")
            except ValueError:
                continue
            if date_part < cutoff_str:
                try:
                    os.remove(file_path)
                except OSError:
                    continue


# Instance globale (lazy initialization)
_loggers: Optional[tuple[logging.Logger, logging.Logger, DataLogger]] = None


def get_loggers() -> tuple[logging.Logger, logging.Logger, DataLogger]:
    """Retourne les loggers configurés (singleton)."""
    global _loggers
    if _loggers is None:
        _loggers = setup_logging()
    return _loggers


def extract_user_data(user_id: Optional[ObjectId] = None, mission_id: Optional[ObjectId] = None) -> Dict[str, Any]:
    """Extrait l'identité (utilisateur, mission) pour le logging."""
    user_data = {}

    if user_id:
        user_data["user_id"] = user_id
    if mission_id:
        user_data["mission_id"] = mission_id

    return user_data
