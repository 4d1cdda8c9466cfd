"""Entity listing: store page + count, then the entity pipeline."""
from typing import Any, Dict

from domain_models import EntityFilter


class EntityLister:
    """Lists entities for GET /entities"""

    def __init__(self, entity_repository, pipeline):
        self.entities = entity_repository
        self.pipeline = pipeline

    async def list(self, filter: EntityFilter, sort: str, order: str,
                   limit: int, offset: int, context) -> Dict[str, Any]:
        records = await self.entities.find_many(filter, sort=sort, order=order, limit=limit, offset=offset)
        total = await self.entities.count(filter)
        entities = await self.pipeline.run_many(records, context)
        return {
            'total': total,
            'entities': entities,
        }
