# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Ticket persistence – listing, creation, partial update and deletion.

Transaction rules
-----------------
* A ticket and its image rows are committed together; nobody can observe a
  new ticket without its pictures.
* Supplying ``pictures`` on update swaps the whole image set (old rows are
  deleted, new rows inserted) inside the same commit.  Sets are never
  merged.
* Two updates racing on the same ticket resolve as last-write-wins.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from helpdesk.core.errors import NotFound
from helpdesk.core.logger import logger
from helpdesk.models.ticket import Ticket, TicketImage
from helpdesk.tickets.schemas import TicketCreate, TicketUpdate


@dataclass(frozen=True)
class TicketPage:
    tickets: List[Ticket]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))


# Largest value an Integer primary key can hold on every supported store
MAX_TICKET_ID = 2**31 - 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TicketService:
    def __init__(self, db: Session):
        self.db = db

    def _load(self, ticket_id: int) -> Ticket:
        if not 1 <= ticket_id <= MAX_TICKET_ID:
            raise NotFound("Ticket not found")
        ticket = (
            self.db.query(Ticket)
            .options(selectinload(Ticket.images))
            .filter(Ticket.id == ticket_id)
            .first()
        )
        if ticket is None:
            raise NotFound("Ticket not found")
        return ticket

    def list_page(self, page: int, page_size: int) -> TicketPage:
        total = self.db.query(func.count(Ticket.id)).scalar() or 0
        offset = (page - 1) * page_size
        # Past the last row: nothing to fetch, and the offset may not even
        # fit the store's integer type
        if offset >= total:
            return TicketPage(tickets=[], page=page, page_size=page_size, total=total)

        tickets = (
            self.db.query(Ticket)
            .options(selectinload(Ticket.images))
            .order_by(Ticket.id.asc())
            .offset(offset)
            .limit(page_size)
            .all()
        )
        return TicketPage(tickets=tickets, page=page, page_size=page_size, total=total)

    def get(self, ticket_id: int) -> Ticket:
        return self._load(ticket_id)

    def create(self, data: TicketCreate) -> Ticket:
        fields = data.model_dump(exclude={"pictures"})
        ticket = Ticket(**fields)
        ticket.images = [TicketImage(url=url) for url in data.pictures or []]
        self.db.add(ticket)
        self.db.commit()

        logger.info("Ticket %d created with %d image(s)", ticket.id, len(data.pictures or []))
        return self._load(ticket.id)

    def update(self, ticket_id: int, data: TicketUpdate) -> Ticket:
        ticket = self._load(ticket_id)
        changes = data.changes()
        pictures = changes.pop("pictures", None)

        for name, value in changes.items():
            setattr(ticket, name, value)
        if pictures is not None:
            # delete-orphan removes the previous rows on flush
            ticket.images = [TicketImage(url=url) for url in pictures]
        ticket.updated_at = _now()
        self.db.commit()

        logger.info("Ticket %d updated (%s)", ticket_id, ", ".join(sorted(data.changes())))
        # Re-read so the response reflects exactly what was committed
        self.db.expire_all()
        return self._load(ticket_id)

    def delete(self, ticket_id: int) -> None:
        ticket = self._load(ticket_id)
        self.db.delete(ticket)
        self.db.commit()
        logger.info("Ticket %d deleted", ticket_id)
