"""Taxpayer notification models"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from myinvois.models.base import ApiModel
from myinvois.models.documents import PageMetadata
from myinvois.models.enums import NotificationStatus, NotificationType


class DeliveryAttempt(ApiModel):
    """One attempt to deliver a notification"""

    attempt_date_time: Optional[datetime] = Field(None, alias="attemptDateTime")
    status: Optional[str] = None
    status_details: Optional[str] = Field(None, alias="statusDetails")


class Notification(ApiModel):
    """Notification sent to the taxpayer"""

    notification_id: str = Field(..., alias="notificationId")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    notification_delivery_id: Optional[str] = Field(None, alias="notificationDeliveryId")
    creation_date_time: Optional[datetime] = Field(None, alias="creationDateTime")
    received_date_time: Optional[datetime] = Field(None, alias="receivedDateTime")
    notification_subject: Optional[str] = Field(None, alias="notificationSubject")
    delivered_date_time: Optional[datetime] = Field(None, alias="deliveredDateTime")
    type_id: int = Field(..., alias="typeId")
    type_name: Optional[str] = Field(None, alias="typeName")
    final_message: Optional[str] = Field(None, alias="finalMessage")
    address: Optional[str] = None
    language: Optional[str] = None
    status: Optional[str] = None
    delivery_attempts: List[DeliveryAttempt] = Field(
        default_factory=list, alias="deliveryAttempts"
    )

    @property
    def notification_type(self) -> Optional[NotificationType]:
        try:
            return NotificationType(self.type_id)
        except ValueError:
            return None

    @property
    def notification_status(self) -> Optional[NotificationStatus]:
        if self.status is None:
            return None
        try:
            if self.status.isdigit():
                return NotificationStatus(int(self.status))
            return NotificationStatus[self.status.upper()]
        except (KeyError, ValueError):
            return None


class NotificationPage(ApiModel):
    """One page of notifications"""

    result: List[Notification] = Field(default_factory=list)
    metadata: PageMetadata = Field(default_factory=PageMetadata)
