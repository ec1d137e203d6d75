from fastapi import APIRouter, Depends, Query
from app.core.dependencies import get_current_principal, get_message_service
from app.modules.messages.schemas import (
    MessageCreate, MessageUpdate, MessageResponse, ClearMessagesResponse
)
from app.modules.messages.service import MessageService
from typing import List, Dict, Optional

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/{owner_id}", response_model=List[MessageResponse])
async def list_messages(
    owner_id: str,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    """Chat history in chronological order (empty for anyone but the owner); whole history unless limit is given"""
    return service.list_messages(principal["id"], owner_id, limit, offset)


@router.post("/{owner_id}", response_model=MessageResponse, status_code=201)
async def create_message(
    owner_id: str,
    message_data: MessageCreate,
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    """Store one chat turn"""
    return service.create_message(principal["id"], owner_id, message_data)


@router.delete("/{owner_id}", response_model=ClearMessagesResponse)
async def clear_messages(
    owner_id: str,
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    """Clear the whole chat history"""
    return ClearMessagesResponse(deleted=service.clear_messages(principal["id"], owner_id))


@router.get("/{owner_id}/{message_id}", response_model=MessageResponse)
async def get_message(
    owner_id: str,
    message_id: str,
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    return service.get_message(principal["id"], owner_id, message_id)


@router.patch("/{owner_id}/{message_id}", response_model=MessageResponse)
async def update_message(
    owner_id: str,
    message_id: str,
    message_data: Optional[MessageUpdate] = None,
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    """Messages are immutable; always rejected"""
    return service.update_message(principal["id"], owner_id, message_id)


@router.delete("/{owner_id}/{message_id}", status_code=204)
async def delete_message(
    owner_id: str,
    message_id: str,
    principal: Dict = Depends(get_current_principal),
    service: MessageService = Depends(get_message_service)
):
    service.delete_message(principal["id"], owner_id, message_id)
    return None
