"""Row intake: typing and defaulting of raw download rows.

Raw rows are mapped onto a fixed set of canonical columns, cleaned
partition-wise with Dask, and materialized to pandas (row sets are at most a
few tens of thousands of rows). No row is ever dropped here; malformed
timestamps become NaT and are excluded later by the window and day-bucket
stages.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import dask
import dask.dataframe as dd
import pandas as pd

log = logging.getLogger(__name__)

CANONICAL_COLUMNS = [
    "timestamp",
    "item_id",
    "resource_url",
    "agent_name",
    "device_type",
    "device_name",
    "country_code",
    "audience_hash",
]
TEXT_COLUMNS = CANONICAL_COLUMNS[1:]

# OP3 field names, camelCase names and canonical names all map onto one column.
FIELD_ALIASES = {
    "time": "timestamp",
    "timestamp": "timestamp",
    "episodeId": "item_id",
    "itemId": "item_id",
    "item_id": "item_id",
    "url": "resource_url",
    "resourceUrl": "resource_url",
    "resource_url": "resource_url",
    "agentName": "agent_name",
    "agent_name": "agent_name",
    "deviceType": "device_type",
    "device_type": "device_type",
    "deviceName": "device_name",
    "device_name": "device_name",
    "countryCode": "country_code",
    "country_code": "country_code",
    "hashedIpAddress": "audience_hash",
    "audienceHash": "audience_hash",
    "audience_hash": "audience_hash",
}

PARTITION_ROWS = 5_000


def _canonical_record(rec: Mapping[str, Any]) -> dict[str, Any]:
    """Rename known fields of one raw row; unknown fields are dropped."""
    out: dict[str, Any] = {}
    for k, v in rec.items():
        col = FIELD_ALIASES.get(k)
        if col is not None:
            out[col] = v
    return out


def _clean_text(value: Any) -> str | None:
    """Return `value` as a stripped string; None, NaN and blanks are missing."""
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _clean_partition(pdf: pd.DataFrame) -> pd.DataFrame:
    """Partition-level intake applied via map_partitions.

    Args:
        pdf: Pandas DataFrame with the canonical columns.

    Returns:
        Cleaned Pandas DataFrame with the same columns.
    """
    pdf = pdf.copy()

    # -----------------------------
    # Text fields: strip, blank -> None
    # -----------------------------
    for col in TEXT_COLUMNS:
        pdf[col] = pdf[col].map(_clean_text).astype(object)

    # -----------------------------
    # Item identity falls back to the URL
    # -----------------------------
    pdf["item_id"] = pdf["item_id"].where(pdf["item_id"].notna(), pdf["resource_url"])

    # -----------------------------
    # Timestamps, always UTC
    # -----------------------------
    pdf["timestamp"] = pd.to_datetime(
        pdf["timestamp"],
        utc=True,
        errors="coerce",
        format="ISO8601",
    ).dt.as_unit("ns")

    return pdf[CANONICAL_COLUMNS]


def rows_to_frame(records: Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    """Build an uncleaned pandas frame with exactly the canonical columns."""
    rows = [_canonical_record(r) for r in (records or [])]
    return pd.DataFrame(rows, columns=CANONICAL_COLUMNS, dtype=object)


def rows_to_ddf(records: Iterable[Mapping[str, Any]] | None, partition_rows: int = PARTITION_ROWS) -> Any:
    """Return raw rows as a Dask DataFrame partitioned by `partition_rows`."""
    pdf = rows_to_frame(records)
    nparts = max(1, len(pdf) // partition_rows)
    return dd.from_pandas(pdf, npartitions=nparts)


def clean_rows_ddf(ddf: Any) -> Any:
    """Apply intake cleaning partition-wise.

    Returns:
        Transformed Dask DataFrame with a stable schema for aggregation.
    """
    meta = _clean_partition(ddf._meta)
    return ddf.map_partitions(_clean_partition, meta=meta)


def empty_rows() -> pd.DataFrame:
    """Return a cleaned, zero-row frame with the canonical schema."""
    return _clean_partition(rows_to_frame([]))


def load_rows(records: Iterable[Mapping[str, Any]] | None, partition_rows: int = PARTITION_ROWS) -> pd.DataFrame:
    """Run row intake and return the materialized pandas frame.

    Args:
        records: Raw download rows (OP3 JSON rows or canonical dicts). ``None``
            is treated as an empty row set.
        partition_rows: Target rows per Dask partition.

    Returns:
        pandas.DataFrame with the canonical columns, original row order and a
        fresh RangeIndex.
    """
    # keep object columns as python objects; blanks must stay None
    with dask.config.set({"dataframe.convert-string": False}):
        ddf = clean_rows_ddf(rows_to_ddf(records, partition_rows))
        pdf = ddf.compute()

    pdf = pdf.reset_index(drop=True)

    bad = int(pdf["timestamp"].isna().sum())
    if bad:
        log.warning("Intake: %d of %d rows have no usable timestamp", bad, len(pdf))
    log.info("Intake complete: %d rows", len(pdf))
    return pdf
