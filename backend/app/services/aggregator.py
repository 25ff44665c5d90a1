import logging
from typing import List, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pydantic import BaseModel

from app.core.errors import ResourceNotFoundError
from app.models.email_campaign import EmailCampaign
from app.models.enums import TrackingKind

logger = logging.getLogger(__name__)

# kind -> (distinct actor set field, raw volume field)
KIND_FIELDS = {
    TrackingKind.OPEN: ("opened_ids", "opened_count"),
    TrackingKind.CLICK: ("clicked_ids", "clicked_count"),
}


def _unique(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _campaign_oid(campaign_id: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(campaign_id)
    except (InvalidId, TypeError):
        return None


class CampaignAggregate(BaseModel):
    campaign_id: str
    name: str
    opened_count: int
    clicked_count: int
    opened_ids: List[str]
    clicked_ids: List[str]

    @property
    def unique_opens(self) -> int:
        return len(self.opened_ids)

    @property
    def unique_clicks(self) -> int:
        return len(self.clicked_ids)

    def to_response(self) -> dict:
        return {
            "campaignId": self.campaign_id,
            "name": self.name,
            "openedCount": self.opened_count,
            "clickedCount": self.clicked_count,
            "uniqueOpens": self.unique_opens,
            "uniqueClicks": self.unique_clicks,
            "openedIds": self.opened_ids,
            "clickedIds": self.clicked_ids,
        }


class CampaignCounters:
    """
    Per-campaign reach (distinct actors) and volume (every hit) counters.

    Both move in a single update_one: $inc for the volume and $addToSet for
    the actor, so two simultaneous hits by the same actor can never leave a
    duplicate in the distinct set.
    """

    async def record_occurrence(self, campaign_id: str, actor_id: Optional[str], kind: TrackingKind) -> bool:
        """Count one occurrence. Returns False when the campaign does not exist."""
        oid = _campaign_oid(campaign_id)
        if oid is None:
            logger.warning(f"[COUNTERS] Ignoring occurrence for malformed campaign id {campaign_id}")
            return False

        ids_field, count_field = KIND_FIELDS[TrackingKind(kind)]
        update = {"$inc": {count_field: 1}}
        if actor_id:
            update["$addToSet"] = {ids_field: str(actor_id)}

        result = await EmailCampaign.get_motor_collection().update_one({"_id": oid}, update)
        if not result.matched_count:
            logger.warning(f"[COUNTERS] Campaign {campaign_id} not found, {kind} not counted")
            return False

        logger.info(f"[COUNTERS] Counted {TrackingKind(kind).value} for campaign {campaign_id} (actor={actor_id or 'unknown'})")
        return True

    async def get_aggregate(self, campaign_id: str) -> CampaignAggregate:
        oid = _campaign_oid(campaign_id)
        campaign = await EmailCampaign.get(oid) if oid else None
        if not campaign:
            raise ResourceNotFoundError("EmailCampaign", campaign_id)

        return CampaignAggregate(
            campaign_id=str(campaign.id),
            name=campaign.name,
            opened_count=campaign.opened_count,
            clicked_count=campaign.clicked_count,
            opened_ids=_unique(campaign.opened_ids),
            clicked_ids=_unique(campaign.clicked_ids),
        )

    async def dedupe_distinct_sets(self) -> int:
        """
        Rewrite campaigns whose actor lists carry duplicates (rows written
        before $addToSet was used). Each rewrite is a compare-and-swap on the
        list read, so an actor added in between is never dropped.
        Returns the number of campaigns repaired.
        """
        repaired = 0
        collection = EmailCampaign.get_motor_collection()
        async for doc in collection.find({}, {"opened_ids": 1, "clicked_ids": 1}):
            changed = False
            for ids_field, _ in KIND_FIELDS.values():
                current = doc.get(ids_field) or []
                unique = _unique(current)
                if len(unique) == len(current):
                    continue
                result = await collection.update_one(
                    {"_id": doc["_id"], ids_field: current},
                    {"$set": {ids_field: unique}},
                )
                if result.modified_count:
                    changed = True
                    logger.info(f"[COUNTERS] Removed {len(current) - len(unique)} duplicate {ids_field} on campaign {doc['_id']}")
                else:
                    logger.info(f"[COUNTERS] Campaign {doc['_id']} changed while deduplicating {ids_field}, will retry next run")
            if changed:
                repaired += 1
        return repaired


counters = CampaignCounters()
