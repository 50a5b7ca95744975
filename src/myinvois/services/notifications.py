"""
Taxpayer notifications
"""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from myinvois.client.api_client import ApiClient, HttpMethod, RequestOptions
from myinvois.exceptions import ApiError, MyInvoisError, ValidationError
from myinvois.models.enums import NotificationLanguage, NotificationStatus, NotificationType
from myinvois.models.notifications import NotificationPage
from myinvois.validators.date_validator import parse_datetime
from myinvois.validators.filters import build_query, validate_choice
from myinvois.validators.pagination import validate_pagination


NOTIFICATIONS_ENDPOINT = "/api/v1.0/notifications/taxpayer"

DATE_FILTERS = ("dateFrom", "dateTo")
DIRECT_FILTERS = ("type", "language", "status", "pageNo", "pageSize")


class NotificationService:
    """Reads notifications addressed to the authenticated taxpayer"""

    def __init__(self, api_client: ApiClient, logger: Optional[logging.Logger] = None) -> None:
        self.api_client = api_client
        self._logger = logger or logging.getLogger(__name__)

    def get_notifications(self, filters: Optional[Mapping[str, Any]] = None) -> NotificationPage:
        """
        Get taxpayer notifications

        Filters: ``dateFrom``, ``dateTo``, ``type`` (NotificationType code),
        ``language`` (ms or en), ``status`` (NotificationStatus code),
        ``pageNo`` and ``pageSize`` (1..100).

        Raises:
            ValidationError: Invalid filters (raised before any network call)
            ApiError: Request failed or the response is malformed
        """
        filters = filters or {}
        self._validate_filters(filters)

        query = build_query(filters, DATE_FILTERS, DIRECT_FILTERS)
        self._logger.debug(f"Retrieving notifications with {query}")

        try:
            response = self.api_client.request(
                HttpMethod.GET, NOTIFICATIONS_ENDPOINT, RequestOptions(params=query)
            )
        except MyInvoisError as e:
            self._logger.error(f"Failed to retrieve notifications: {e}")
            raise

        if "result" not in response or "metadata" not in response:
            raise ApiError("Invalid response format from notifications endpoint", details=response)

        try:
            page = NotificationPage.model_validate(response)
        except PydanticValidationError as e:
            raise ApiError(
                "Invalid response format from notifications endpoint",
                cause=e,
                details=response,
            ) from e

        self._logger.debug(f"Retrieved {len(page.result)} notification(s)")
        return page

    def _validate_filters(self, filters: Mapping[str, Any]) -> None:
        validate_pagination(filters.get("pageNo"), filters.get("pageSize"))
        validate_choice(
            filters, "language", [lang.value for lang in NotificationLanguage],
            "Language must be either 'ms' or 'en'",
        )
        validate_choice(
            filters, "type", [t.value for t in NotificationType],
            "Invalid notification type", convert=int,
        )
        validate_choice(
            filters, "status", [s.value for s in NotificationStatus],
            "Invalid notification status", convert=int,
        )

        if filters.get("dateFrom") and filters.get("dateTo"):
            date_from = parse_datetime(filters["dateFrom"], "dateFrom")
            date_to = parse_datetime(filters["dateTo"], "dateTo")
            if date_from > date_to:
                raise ValidationError(
                    "Invalid date range",
                    errors={"dateFrom": ["Start date must be before end date"]},
                )
