"""
Record normalization pipeline for converting upstream records to ticks.

This module provides the TickNormalizer class that applies the configured
field-name priorities to each upstream record. Field names live in
configuration so a new upstream schema revision only needs a settings
change.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from ..config.defaults import NormalizationParams
from ..errors import DataQualityError, MalformedDataError, MissingDataError
from .models import NormalizationResult, Tick
from .parsers import (
    find_first,
    normalize_expiry,
    parse_optional_price,
    parse_price,
    parse_time_label,
)

logger = logging.getLogger(__name__)


class TickNormalizer:
    """
    Normalizes upstream futures records into canonical ticks.

    Each record is handled in isolation: a record without a usable price or
    with an unreadable expiry is rejected, the rest of the batch is kept.
    """

    def __init__(self, params: Optional[NormalizationParams] = None):
        """
        Initialize normalizer with field-name configuration.

        Args:
            params: Normalization parameters, defaults if omitted
        """
        self.params = params or NormalizationParams()

    def resolve_expiry(self, record: dict[str, Any]) -> str:
        """Canonical expiry key for a record, or the default bucket."""
        raw = find_first(record, self.params.expiry_fields)
        if raw is None:
            return self.params.default_expiry
        return normalize_expiry(raw)

    def normalize_record(self, record: dict[str, Any], now: datetime) -> Tick:
        """
        Normalize a single upstream record.

        Args:
            record: Raw upstream record
            now: Wall-clock time of the fetch, used when the record has no time

        Returns:
            Normalized Tick

        Raises:
            DataQualityError: if the record cannot be turned into a tick
        """
        if not isinstance(record, dict):
            raise MalformedDataError(
                "Record must be an object", raw_data=str(record)[:100]
            )

        return Tick(
            time=parse_time_label(record, self.params.time_fields, now),
            ltp=parse_price(record, self.params.price_fields),
            expiry=self.resolve_expiry(record),
            prev_close=parse_optional_price(record, self.params.prev_close_fields),
        )

    def normalize_records(self, records: Iterable[dict[str, Any]],
                          now: datetime) -> NormalizationResult:
        """
        Normalize a batch of upstream records with per-record isolation.

        Args:
            records: Raw upstream records
            now: Wall-clock time of the fetch

        Returns:
            NormalizationResult with accepted ticks and rejected records
        """
        ticks = []
        rejected = []

        for record in records:
            try:
                ticks.append(self.normalize_record(record, now))
            except MissingDataError as e:
                logger.warning(f"Skipping record with missing {e.data_type or 'data'}: {e}")
                rejected.append((record, str(e)))
            except DataQualityError as e:
                logger.warning(f"Skipping malformed record: {e}")
                rejected.append((record, str(e)))

        return NormalizationResult(ticks=ticks, rejected=rejected)
