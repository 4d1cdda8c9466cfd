"""Batch resolution of parent identifiers into {id, name} references."""
import logging
from typing import Any, Dict, Iterable, Mapping, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from transform.base import EntityReference

logger = logging.getLogger(__name__)


def _parent_ids(record: Any):
    """memberOf / rootCollection values of a stored record or public shape"""
    if isinstance(record, Mapping):
        return record.get('memberOf'), record.get('rootCollection')
    return getattr(record, 'member_of', None), getattr(record, 'root_collection', None)


class ReferenceResolver:
    """Resolves every parent referenced by a batch with one store lookup.

    Identifiers with no store record are left out of the result; callers
    treat a missing key as a null reference.
    """

    def __init__(self, entity_repository):
        self.repository = entity_repository

    @staticmethod
    def collect_ids(records: Iterable[Any]) -> Set[str]:
        """Union of all raw (unresolved) parent identifiers in the batch"""
        ids = set()
        for record in records:
            for value in _parent_ids(record):
                if isinstance(value, str):
                    ids.add(value)
        return ids

    async def resolve(self, records: Iterable[Any]) -> Dict[str, 'EntityReference']:
        ids = self.collect_ids(records)
        if not ids:
            return {}

        parents = await self.repository.find_by_ids(sorted(ids))
        references = {
            parent.rocrate_id: {'id': parent.rocrate_id, 'name': parent.name}
            for parent in parents
        }

        dangling = ids - references.keys()
        if dangling:
            logger.debug(f"{len(dangling)} parent reference(s) not in store: {sorted(dangling)}")
        return references
