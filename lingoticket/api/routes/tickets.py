from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from lingoticket.dependencies.tickets import get_ticket_service
from lingoticket.tickets.models import DeliveryReceipt, Ticket, TranslationStatusView
from lingoticket.tickets.service import TicketService, TicketValidationError
from lingoticket.tickets.state import TicketStatus

router = APIRouter(prefix="/tickets", tags=["tickets"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketCreateRequest(CamelModel):
    original_text: str
    source_lang: str
    target_lang: str

    @field_validator("original_text", "source_lang", "target_lang")
    @classmethod
    def _require_text(cls, value: str, info: ValidationInfo) -> str:
        if not value.strip():
            raise ValueError(f"{to_camel(info.field_name)} is required")
        return value


class TicketResponse(CamelModel):
    id: str
    original_text: str
    source_lang: str
    target_lang: str
    status: TicketStatus
    translated_text: str | None = None
    created_at: datetime
    translated_at: datetime | None = None


class DeliveryPayloadResponse(CamelModel):
    original_text: str
    translated_text: str
    source_lang: str
    target_lang: str


class DeliveryResponse(CamelModel):
    delivered: bool
    ticket_id: str
    delivered_at: datetime
    payload: DeliveryPayloadResponse


class TranslationStatusResponse(CamelModel):
    id: str
    status: TicketStatus
    translated_text: str | None = None


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        original_text=ticket.original_text,
        source_lang=ticket.source_lang,
        target_lang=ticket.target_lang,
        status=ticket.status,
        translated_text=ticket.translated_text,
        created_at=ticket.created_at,
        translated_at=ticket.translated_at,
    )


def _to_delivery_response(receipt: DeliveryReceipt) -> DeliveryResponse:
    return DeliveryResponse(
        delivered=receipt.delivered,
        ticket_id=receipt.ticket_id,
        delivered_at=receipt.delivered_at,
        payload=DeliveryPayloadResponse(
            original_text=receipt.payload.original_text,
            translated_text=receipt.payload.translated_text,
            source_lang=receipt.payload.source_lang,
            target_lang=receipt.payload.target_lang,
        ),
    )


def _to_status_response(view: TranslationStatusView) -> TranslationStatusResponse:
    return TranslationStatusResponse(id=view.id, status=view.status, translated_text=view.translated_text)


def _parse_status(token: str | None) -> TicketStatus | None:
    if token is None or not token.strip():
        return None
    try:
        return TicketStatus.parse(token)
    except ValueError as exc:
        raise TicketValidationError(str(exc)) from exc


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreateRequest, service: TicketServiceDep) -> TicketResponse:
    ticket = await service.create_ticket(
        original_text=payload.original_text,
        source_lang=payload.source_lang,
        target_lang=payload.target_lang,
    )
    return _to_response(ticket)


@router.get("", response_model=list[TicketResponse])
async def list_tickets(
    service: TicketServiceDep,
    status_filter: str | None = Query(default=None, alias="status"),
) -> list[TicketResponse]:
    tickets = await service.list_tickets(status=_parse_status(status_filter))
    return [_to_response(ticket) for ticket in tickets]


@router.get("/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: str, service: TicketServiceDep) -> TicketResponse:
    ticket = await service.get_ticket(ticket_id)
    return _to_response(ticket)


@router.get("/{ticket_id}/status", response_model=TranslationStatusResponse)
async def get_ticket_status(ticket_id: str, service: TicketServiceDep) -> TranslationStatusResponse:
    view = await service.get_status(ticket_id)
    return _to_status_response(view)


@router.post("/{ticket_id}/translate", response_model=TicketResponse)
async def translate_ticket(ticket_id: str, service: TicketServiceDep) -> TicketResponse:
    ticket = await service.translate(ticket_id)
    return _to_response(ticket)


@router.post("/{ticket_id}/deliver", response_model=DeliveryResponse)
async def deliver_ticket(ticket_id: str, service: TicketServiceDep) -> DeliveryResponse:
    receipt = await service.deliver(ticket_id)
    return _to_delivery_response(receipt)
