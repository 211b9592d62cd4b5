# questengine/core/bson_utils.py
# ObjectId compatible Pydantic v2 + modèle de base pour les documents Mongo (progressions, évaluations).
from __future__ import annotations

from typing import Any, Optional
from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict, GetCoreSchemaHandler
from pydantic_core import core_schema
from pydantic.json_schema import JsonSchemaValue, GetJsonSchemaHandler


class PyObjectId(ObjectId):
    """ObjectId utilisable comme champ Pydantic.

    Description:
        Accepte un `ObjectId` ou une chaîne hex de 24 caractères, et se sérialise
        en chaîne dans les documents JSON (réponses, logs).
    """

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.json_or_python_schema(
            json_schema=core_schema.no_info_plain_validator_function(cls._validate),
            python_schema=core_schema.no_info_plain_validator_function(cls._validate),
            serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="json"),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, core_schema_obj: core_schema.CoreSchema, handler: GetJsonSchemaHandler) -> JsonSchemaValue:
        return {
            "type": "string",
            "format": "objectid",
            "pattern": "^[a-fA-F0-9]{24}$",
            "examples": ["507f1f77bcf86cd799439011"]
        }

    @classmethod
    def _validate(cls, v: Any) -> ObjectId:
        """Valide et convertit en ObjectId.

        Raises:
            ValueError: Si la valeur n'est pas un ObjectId valide.
        """
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError(f"Invalid ObjectId: {v!r}")


class MongoBaseModel(BaseModel):
    """BaseModel Pydantic pour documents Mongo.

    Description:
        Le champ `_id` est exposé sous le nom `id` ; les ObjectId restent des
        ObjectId en mode Python et deviennent des chaînes en JSON.
    """
    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


def dump_mongo(model: BaseModel, *, exclude_none: bool = True) -> dict:
    """Dump d'un modèle pour Mongo (dict, alias `_id` respecté).

    Args:
        model (BaseModel): Modèle Pydantic à sérialiser.
        exclude_none (bool): Exclure les champs None.

    Returns:
        dict: Document prêt à insérer/mettre à jour.
    """
    return model.model_dump(by_alias=True, exclude_none=exclude_none)
