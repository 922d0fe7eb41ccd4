"""podcast_analytics package.

Contains modules for fetching OP3 download rows for a podcast, normalizing
them into a typed row frame, and aggregating them into the analytics result
set served by the Streamlit dashboard.

Architecture:
- Ingest (OP3 API / local snapshot) → Intake (clean) → Aggregate
- Dask is used for partition-wise intake cleaning
- Pydantic models validate the API payloads and the aggregate output
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
