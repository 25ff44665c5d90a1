import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Mapping, Optional, Type, Union

from pydantic import BaseModel, TypeAdapter

from app.core.errors import LedgerQueryError
from app.models.details import EntryDetails, GenericDetails
from app.models.enums import ResponseStatus, Role
from app.models.ledger_entry import LedgerEntry
from app.models.user import User
from app.services.periods import period_start, to_mongo_datetime

logger = logging.getLogger(__name__)

_details_adapter = TypeAdapter(EntryDetails)


def _value(item):
    return item.value if isinstance(item, Enum) else item


def coerce_details(details: Union[BaseModel, Mapping, None]) -> BaseModel:
    """Accept a typed details model or a plain mapping (tagged or not)."""
    if details is None:
        return GenericDetails()
    if isinstance(details, BaseModel):
        return details
    if "kind" in details:
        return _details_adapter.validate_python(dict(details))
    return GenericDetails(data=dict(details))


class LedgerFilter(BaseModel):
    search: Optional[str] = None
    role: Optional[str] = None
    action: Optional[str] = None
    actor_id: Optional[str] = None
    response_status: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    period: Optional[str] = None


@dataclass
class LedgerPage:
    items: List[LedgerEntry] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = 20

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def has_more(self) -> bool:
        return self.skip + len(self.items) < self.total_count

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit else 0


class LedgerStore:
    """
    Append-only store over one ledger collection.

    Appends are best-effort: a failed write is logged and swallowed so the
    operation being recorded (a sign-in, an admin edit, a pixel hit) is never
    affected. Reads are not: a failed query raises LedgerQueryError.
    """

    def __init__(self, model: Type[LedgerEntry], label: str):
        self.model = model
        self.label = label

    async def append(
        self,
        action,
        actor_id: Optional[str] = None,
        actor_role: Role = Role.USER,
        target_id: Optional[str] = None,
        target_type=None,
        response_status: Optional[ResponseStatus] = None,
        details=None,
    ) -> Optional[LedgerEntry]:
        action = _value(action)
        if not action or not str(action).strip():
            logger.error(f"[LEDGER] Refusing to record {self.label} entry without an action (actor={actor_id})")
            return None

        try:
            entry = self.model(
                actor_id=str(actor_id) if actor_id else None,
                actor_role=actor_role or Role.USER,
                action=str(action).strip(),
                target_id=str(target_id) if target_id else None,
                target_type=_value(target_type),
                response_status=response_status,
                details=coerce_details(details),
            )
            await entry.insert()
            logger.debug(f"[LEDGER] Recorded {self.label} entry {entry.action} for actor {entry.actor_id}")
            return entry
        except Exception as e:
            logger.error(f"[LEDGER] Failed to record {self.label} entry {action}: {e}", exc_info=True)
            return None

    async def build_query(self, ledger_filter: LedgerFilter) -> dict:
        query = {}

        if ledger_filter.search and ledger_filter.search.strip():
            pattern = {"$regex": re.escape(ledger_filter.search.strip()), "$options": "i"}
            clauses = [{"action": pattern}]
            # Actor name/email live on the user directory, not on the entry
            actors = await User.find({"$or": [{"name": pattern}, {"email": pattern}]}).to_list()
            if actors:
                clauses.append({"actor_id": {"$in": [str(actor.id) for actor in actors]}})
            query["$or"] = clauses

        role = (ledger_filter.role or "").upper()
        if role == "NOTUSER":
            query["actor_role"] = {"$ne": Role.USER.value}
        elif role and role != "ALL":
            query["actor_role"] = role

        if ledger_filter.action and ledger_filter.action.lower() != "all":
            query["action"] = ledger_filter.action.upper()

        if ledger_filter.actor_id:
            query["actor_id"] = ledger_filter.actor_id

        if ledger_filter.response_status:
            query["response_status"] = ledger_filter.response_status.upper()

        lower = ledger_filter.since
        period_lower = period_start(ledger_filter.period)
        if period_lower and (lower is None or to_mongo_datetime(period_lower) > to_mongo_datetime(lower)):
            lower = period_lower
        bounds = {}
        if lower:
            bounds["$gte"] = to_mongo_datetime(lower)
        if ledger_filter.until:
            bounds["$lte"] = to_mongo_datetime(ledger_filter.until)
        if bounds:
            query["timestamp"] = bounds

        return query

    async def query(self, ledger_filter: Optional[LedgerFilter] = None, page: int = 1, limit: int = 20) -> LedgerPage:
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        ledger_filter = ledger_filter or LedgerFilter()
        # Reject a bad ?period= as a caller error before touching storage
        period_start(ledger_filter.period)
        result = LedgerPage(page=page, limit=limit)
        try:
            query = await self.build_query(ledger_filter)
            result.items = (
                await self.model.find(query)
                .sort("-timestamp", "-_id")
                .skip(result.skip)
                .limit(limit)
                .to_list()
            )
            result.total_count = await self.model.find(query).count()
        except Exception as e:
            logger.error(f"[LEDGER] Failed to query {self.label} entries: {e}", exc_info=True)
            raise LedgerQueryError(f"Failed to fetch {self.label} entries", e) from e

        logger.info(
            f"[LEDGER] {self.label} page {page}: {len(result.items)} of {result.total_count} (has_more={result.has_more})"
        )
        return result

    async def available_actions(self, actor_id: Optional[str] = None) -> List[str]:
        try:
            query = {"actor_id": actor_id} if actor_id else {}
            actions = await self.model.distinct("action", query)
        except Exception as e:
            logger.error(f"[LEDGER] Failed to list {self.label} actions: {e}", exc_info=True)
            raise LedgerQueryError(f"Failed to fetch {self.label} types", e) from e
        return sorted(actions)

    async def recent(self, actor_id: Optional[str] = None, limit: int = 10) -> List[LedgerEntry]:
        page = await self.query(LedgerFilter(actor_id=actor_id), page=1, limit=limit)
        return page.items

    async def count(self, actor_id: Optional[str] = None) -> int:
        try:
            return await self.model.find({"actor_id": actor_id} if actor_id else {}).count()
        except Exception as e:
            logger.error(f"[LEDGER] Failed to count {self.label} entries: {e}", exc_info=True)
            raise LedgerQueryError(f"Failed to count {self.label} entries", e) from e
