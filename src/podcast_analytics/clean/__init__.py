"""Row intake for the pipeline.

Provides functions that turn raw OP3 download rows (or rows already keyed by
the canonical names) into a typed pandas frame: UTC timestamps, stripped text,
and the `item_id` fallback to the download URL.
"""
