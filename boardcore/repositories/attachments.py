"""Attachment repository."""

from typing import Any

from boardcore.core.entities import Attachment
from boardcore.ports.cache import RawRecord
from boardcore.repositories.base import CachedRepository, epoch_to_datetime, to_int


class AttachmentRepository(CachedRepository):
    collection = "member_attachments"

    def load_attachment_data_by_id(self, attachment_id: Any) -> RawRecord | None:
        return self._load_by_id(attachment_id)

    def build_attachment_from_data(self, data: RawRecord | None) -> Attachment | None:
        if not data:
            return None
        return Attachment(
            id=to_int(data.get("id")),
            member_id=to_int(data.get("memberId")),
            file_name=data.get("fileName") or "",
            file_size=to_int(data.get("fileSize")),
            uploaded_at=epoch_to_datetime(data.get("uploadedAt")),
            total_downloads=to_int(data.get("totalDownloads")),
        )

    def get_attachment_by_id(self, attachment_id: Any) -> Attachment | None:
        return self.build_attachment_from_data(
            self.load_attachment_data_by_id(attachment_id)
        )
