# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Ticket endpoints – paginated listing, create, partial update, delete.

Every handler sits behind ``require_user``: an anonymous request is answered
with 401 before its body or query string is even validated, so it can never
touch the store.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from helpdesk.core.security import require_user
from helpdesk.database import get_db
from helpdesk.tickets.schemas import (
    Pagination,
    TicketCreate,
    TicketListQuery,
    TicketListResponse,
    TicketResponse,
    TicketUpdate,
)
from helpdesk.tickets.service import TicketService

router = APIRouter(prefix="/tickets", tags=["tickets"])


def get_ticket_service(db: Session = Depends(get_db)) -> TicketService:
    return TicketService(db)


def ticket_list_query(
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
) -> TicketListQuery:
    """
    Validate the raw query strings.  Errors are re-raised under the
    ``query`` location so they render like any other request error.
    """
    raw = {"page": page, "pageSize": page_size}
    try:
        return TicketListQuery.model_validate({k: v for k, v in raw.items() if v is not None})
    except PydanticValidationError as exc:
        errors = [
            {**err, "loc": ("query", *err["loc"])}
            for err in exc.errors(include_url=False, include_context=False)
        ]
        raise RequestValidationError(errors)


# ---------------------------------------------------------------------------
# GET /tickets
# ---------------------------------------------------------------------------


@router.get("", response_model=TicketListResponse)
def list_tickets(
    user_id: int = Depends(require_user),
    query: TicketListQuery = Depends(ticket_list_query),
    service: TicketService = Depends(get_ticket_service),
):
    """One page of tickets in ascending id order, with their images."""
    result = service.list_page(query.page, query.page_size)
    return TicketListResponse(
        data=[TicketResponse.model_validate(t) for t in result.tickets],
        pagination=Pagination(
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


# ---------------------------------------------------------------------------
# GET /tickets/{id}
# ---------------------------------------------------------------------------


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: int,
    user_id: int = Depends(require_user),
    service: TicketService = Depends(get_ticket_service),
):
    return service.get(ticket_id)


# ---------------------------------------------------------------------------
# POST /tickets
# ---------------------------------------------------------------------------


@router.post("", response_model=TicketResponse)
def create_ticket(
    body: TicketCreate,
    user_id: int = Depends(require_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Create a ticket together with its picture URLs in one transaction."""
    return service.create(body)


# ---------------------------------------------------------------------------
# PUT /tickets/{id}
# ---------------------------------------------------------------------------


@router.put("/{ticket_id}", response_model=TicketResponse)
def update_ticket(
    ticket_id: int,
    body: TicketUpdate,
    user_id: int = Depends(require_user),
    service: TicketService = Depends(get_ticket_service),
):
    """
    Partial update.  Keys missing from the body are left alone; ``pictures``
    replaces the whole image set.
    """
    return service.update(ticket_id, body)


# ---------------------------------------------------------------------------
# DELETE /tickets/{id}
# ---------------------------------------------------------------------------


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket(
    ticket_id: int,
    user_id: int = Depends(require_user),
    service: TicketService = Depends(get_ticket_service),
):
    """Delete a ticket; its image rows go with it."""
    service.delete(ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
