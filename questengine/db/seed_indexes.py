# questengine/db/seed_indexes.py
"""
Idempotent index seeding for the mission engine.

- Uses get_collection() (no direct client here).
- Matching by KEYS: if an index with same keys exists, keep it when options match.
- If options differ (unique), drop & recreate.
- Progressions: one document per (user_id, mission_id) pair.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union
from pymongo import ASCENDING, DESCENDING
from pymongo.operations import IndexModel

from questengine.db.mongodb import EVALUATIONS_COLLECTION, PROGRESSIONS_COLLECTION, get_collection

Direction = Union[int, str]
KeySpec = List[Tuple[str, Direction]]


def _normalize_key_from_mongo(key_doc: Dict[str, Any]) -> KeySpec:
    """Mongo returns an OrderedDict-like mapping; convert to list of (field, direction)."""
    norm: KeySpec = []
    for k, v in key_doc.items():
        if isinstance(v, (int, float)):
            norm.append((k, int(v)))
        else:
            norm.append((k, str(v)))
    return norm


async def _find_existing_by_keys(coll, keys: KeySpec) -> Optional[Dict[str, Any]]:
    async for ix in coll.list_indexes():
        if 'key' in ix and _normalize_key_from_mongo(ix['key']) == keys:
            return ix
    return None


async def ensure_index(coll_name: str, keys: KeySpec, *, name: Optional[str] = None,
                       unique: Optional[bool] = None) -> None:
    coll = get_collection(coll_name)
    existing = await _find_existing_by_keys(coll, keys)
    if existing and bool(existing.get('unique', False)) == bool(unique):
        return
    if existing:
        await coll.drop_index(existing['name'])
    opts: Dict[str, Any] = {}
    if name:
        opts['name'] = name
    if unique is not None:
        opts['unique'] = unique
    await coll.create_indexes([IndexModel(keys, **opts)])


async def ensure_indexes() -> None:
    # ---------- progressions ----------
    await ensure_index(PROGRESSIONS_COLLECTION, [('user_id', ASCENDING), ('mission_id', ASCENDING)],
                       name='uniq_user_mission_pair', unique=True)
    await ensure_index(PROGRESSIONS_COLLECTION, [('mission_id', ASCENDING), ('state', ASCENDING)])
    await ensure_index(PROGRESSIONS_COLLECTION, [('user_id', ASCENDING), ('updated_at', DESCENDING)])

    # ---------- evaluations ----------
    await ensure_index(EVALUATIONS_COLLECTION, [('mission_id', ASCENDING), ('fid', ASCENDING), ('family', ASCENDING)])
    await ensure_index(EVALUATIONS_COLLECTION, [('user_id', ASCENDING), ('created_at', DESCENDING)])
