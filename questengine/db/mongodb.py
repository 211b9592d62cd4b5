# questengine/db/mongodb.py
# Initialise (paresseusement) le client MongoDB à partir des settings et expose l'accès aux collections.

from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from questengine.core.settings import get_settings

PROGRESSIONS_COLLECTION = "progressions"
EVALUATIONS_COLLECTION = "evaluations"

_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    """Retourne le client MongoDB partagé (créé au premier appel).

    Description:
        Le client n'est pas créé à l'import du module : les tests unitaires
        peuvent ainsi importer les services sans serveur MongoDB.

    Returns:
        AsyncIOMotorClient: Client asynchrone.
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(get_settings().mongodb_uri)
    return _client


def get_db() -> AsyncIOMotorDatabase:
    """Retourne la base configurée (`Settings.mongodb_db`)."""
    return get_client()[get_settings().mongodb_db]


def get_collection(name: str) -> AsyncIOMotorCollection:
    """Retourne une collection MongoDB par son nom.

    Description:
        Si la collection n'existe pas encore côté serveur, MongoDB la créera à la
        première insertion.

    Args:
        name (str): Nom de la collection (ex. "progressions", "evaluations").

    Returns:
        AsyncIOMotorCollection: Instance de collection MongoDB asynchrone.
    """
    return get_db()[name]


def close_client() -> None:
    """Ferme le client partagé s'il a été ouvert."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
