"""
Taxpayer TIN validation
"""

import logging
from typing import Optional

from myinvois.cache import CacheStore, MemoryCache
from myinvois.client.api_client import ApiClient, HttpMethod, RequestOptions
from myinvois.exceptions import ApiError, MyInvoisError
from myinvois.validators.tin_validator import validate_id_type, validate_id_value, validate_tin


TAXPAYER_ENDPOINT = "/api/v1.0/taxpayer/validate"
TIN_CACHE_PREFIX = "myinvois_tin_validation_"
TIN_CACHE_TTL = 86400


class TaxpayerService:
    """
    Validates taxpayer TINs against a secondary identifier

    Positive results are cached for 24 hours. An unknown taxpayer is an
    expected outcome and is returned as False.
    """

    def __init__(
        self,
        api_client: ApiClient,
        cache: Optional[CacheStore] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_client = api_client
        self.cache = cache if cache is not None else MemoryCache()
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def cache_key(tin: str, id_type: str, id_value: str) -> str:
        return f"{TIN_CACHE_PREFIX}{tin}_{id_type}_{id_value}"

    def validate_taxpayer_tin(
        self,
        tin: str,
        id_type: str,
        id_value: str,
        use_cache: bool = True,
    ) -> bool:
        """
        Check that a TIN is registered for the given identifier

        Args:
            tin: Tax Identification Number (C followed by 10 digits)
            id_type: NRIC, PASSPORT, BRN or ARMY
            id_value: Identifier value matching the type's format
            use_cache: Serve and store positive results in the cache

        Returns:
            True when the taxpayer is found, False when the API answers 404

        Raises:
            ValidationError: Malformed TIN, ID type or ID value
            ApiError: Any other failure
        """
        validate_tin(tin)
        id_type = validate_id_type(id_type)
        validate_id_value(id_type, id_value)

        key = self.cache_key(tin, id_type, id_value)
        if use_cache and self.cache.get(key) is not None:
            self._logger.debug(f"TIN validation cache hit for {tin}")
            return True

        try:
            self.api_client.request(
                HttpMethod.GET,
                f"{TAXPAYER_ENDPOINT}/{tin}",
                RequestOptions(params={"idType": id_type, "idValue": id_value}),
            )
        except ApiError as e:
            if e.status_code == 404:
                self._logger.debug(f"Taxpayer {tin} not found for {id_type}")
                return False
            self._logger.error(f"TIN validation failed for {tin}: {e}")
            raise
        except MyInvoisError as e:
            self._logger.error(f"TIN validation failed for {tin}: {e}")
            raise

        if use_cache:
            self.cache.put(key, True, TIN_CACHE_TTL)
        self._logger.debug(f"Taxpayer {tin} validated for {id_type}")
        return True
