# questengine/core/crypto.py
# Chiffrement déterministe des solutions de quiz (clé partagée côté serveur uniquement).

from __future__ import annotations

import base64
import binascii
from functools import lru_cache
from typing import Iterable

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from questengine.core.exceptions import SolutionTokenError
from questengine.core.settings import get_settings

# Alphabet base64 "urlsafe" : le délimiteur de jeton ne doit pas en faire partie
_B64_ALPHABET = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_=")


def _sha256(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA256(), backend=default_backend())
    digest.update(data)
    return digest.finalize()


class SolutionCipher:
    """Chiffrement symétrique des solutions envoyées au client.

    Description:
        AES-256-CBC avec un IV dérivé de la clé : pour une clé donnée, le même
        texte produit toujours le même chiffré. La comparaison réponse/solution
        se fait donc directement dans l'espace chiffré, sans jamais exposer la clé.
        Le chiffré est encodé en base64 "urlsafe" pour être intégré dans une page.

    Attributes:
        delimiter (str): Séparateur des solutions multiples dans un jeton.
    """

    def __init__(self, secret_key: str, delimiter: str = ","):
        if not secret_key:
            raise ValueError("A non-empty secret key is required")
        if not delimiter or set(delimiter) & _B64_ALPHABET:
            raise ValueError(f"Invalid solution delimiter: {delimiter!r}")

        self._key = _sha256(secret_key.encode("utf-8"))
        self._iv = _sha256(b"questengine-iv:" + self._key)[:16]
        self.delimiter = delimiter

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv), backend=default_backend())

    def encode(self, plaintext: str) -> str:
        """Chiffre une chaîne.

        Args:
            plaintext (str): Texte clair (réponse ou solution).

        Returns:
            str: Chiffré base64 urlsafe.
        """
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(str(plaintext).encode("utf-8")) + padder.finalize()

        encryptor = self._cipher().encryptor()
        encrypted = encryptor.update(data) + encryptor.finalize()
        return base64.urlsafe_b64encode(encrypted).decode("ascii")

    def decode(self, ciphertext: str) -> str:
        """Déchiffre une chaîne produite par `encode`.

        Raises:
            SolutionTokenError: Si le chiffré est altéré ou produit avec une autre clé.
        """
        try:
            encrypted = base64.urlsafe_b64decode(ciphertext.encode("ascii"))
            decryptor = self._cipher().decryptor()
            data = decryptor.update(encrypted) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(data) + unpadder.finalize()
            return plain.decode("utf-8")
        except (ValueError, binascii.Error, UnicodeError) as e:
            raise SolutionTokenError(f"Unreadable solution token: {ciphertext!r}") from e

    def join_token(self, solutions: Iterable[str]) -> str:
        """Chiffre chaque solution et les joint en un seul jeton."""
        return self.delimiter.join(self.encode(s) for s in solutions)

    def split_token(self, token: str | None) -> list[str]:
        """Découpe un jeton en solutions chiffrées (vide si aucune solution)."""
        if not token:
            return []
        return [part for part in token.split(self.delimiter) if part]


@lru_cache
def get_cipher() -> SolutionCipher:
    """Retourne le chiffreur partagé construit depuis la configuration."""
    settings = get_settings()
    return SolutionCipher(settings.quiz_secret_key, settings.solution_delimiter)
