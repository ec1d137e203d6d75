from supabase import Client
from app.config.policies_config import Operation, Resource
from app.config.settings import settings
from app.core.access_gate import AccessGate
from app.core.errors import ConstraintViolationError, NotFoundError, translate_store_error
from app.modules.messages.schemas import MessageCreate, MessageResponse
from typing import List, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, supabase: Client, gate: AccessGate):
        self.supabase = supabase
        self.gate = gate

    def create_message(self, requester_id: str, owner_id: str, message_data: MessageCreate) -> MessageResponse:
        """Append one chat turn to owner_id's history"""
        self.gate.authorize_write(Resource.MESSAGES, Operation.CREATE, requester_id, owner_id)
        if len(message_data.content) > settings.message_max_length:
            raise ConstraintViolationError(
                "content", "is too long", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
            )

        try:
            result = self.supabase.table("messages").insert({
                "user_id": owner_id,
                "content": message_data.content,
                "is_user_message": message_data.is_user_message,
            }).execute()
        except Exception as e:
            raise translate_store_error(e)

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create message")
        return MessageResponse.from_row(result.data[0])

    def list_messages(
        self,
        requester_id: str,
        owner_id: str,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[MessageResponse]:
        """Owner's history, oldest first. Anyone else sees an empty history.

        Without a limit the whole history is returned, fetched in pages of
        settings.message_list_limit rows.
        """
        if not self.gate.can_read_owner(Resource.MESSAGES, requester_id, owner_id):
            return []

        if limit is not None:
            rows = self._fetch_page(owner_id, limit, offset)
        else:
            rows = []
            page_size = settings.message_list_limit
            while True:
                page = self._fetch_page(owner_id, page_size, offset)
                rows.extend(page)
                if len(page) < page_size:
                    break
                offset += page_size

        rows = self.gate.filter_rows(Resource.MESSAGES, requester_id, rows)
        return [MessageResponse.from_row(row) for row in rows]

    def _fetch_page(self, owner_id: str, limit: int, offset: int) -> list:
        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("user_id", owner_id)\
                .order("timestamp", desc=False)\
                .order("id", desc=False)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        except Exception as e:
            raise translate_store_error(e)
        return result.data or []

    def get_message(self, requester_id: str, owner_id: str, message_id: str) -> MessageResponse:
        """Single message; hidden messages look exactly like missing ones"""
        if not self.gate.can_read_owner(Resource.MESSAGES, requester_id, owner_id):
            raise NotFoundError("Message not found")

        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("id", message_id)\
                .eq("user_id", owner_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "Message not found")

        rows = self.gate.filter_rows(Resource.MESSAGES, requester_id, result.data or [])
        if not rows:
            raise NotFoundError("Message not found")
        return MessageResponse.from_row(rows[0])

    def update_message(self, requester_id: str, owner_id: str, message_id: str) -> MessageResponse:
        # Always denied: messages are immutable once written
        self.gate.authorize_write(Resource.MESSAGES, Operation.UPDATE, requester_id, owner_id)
        raise HTTPException(status_code=500, detail="Message update policy misconfigured")

    def delete_message(self, requester_id: str, owner_id: str, message_id: str) -> bool:
        self.gate.authorize_write(Resource.MESSAGES, Operation.DELETE, requester_id, owner_id)
        try:
            result = self.supabase.table("messages")\
                .delete()\
                .eq("id", message_id)\
                .eq("user_id", owner_id)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "Message not found")

        if not result.data:
            raise NotFoundError("Message not found")
        return True

    def clear_messages(self, requester_id: str, owner_id: str) -> int:
        """Delete owner_id's whole history and return how many rows went away"""
        self.gate.authorize_write(Resource.MESSAGES, Operation.DELETE, requester_id, owner_id)
        try:
            result = self.supabase.table("messages")\
                .delete()\
                .eq("user_id", owner_id)\
                .execute()
        except Exception as e:
            raise translate_store_error(e)

        deleted = len(result.data or [])
        logger.info(f"Cleared {deleted} message(s) for principal {owner_id}")
        return deleted
