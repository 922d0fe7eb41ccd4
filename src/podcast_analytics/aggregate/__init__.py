"""Aggregation stages for the analytics result set.

This package turns the intake frame into the dashboard's result set: time
windows, category rankings, per-episode stats, and the cumulative per-episode
time series. Every function is pure; "now" is always passed in.
"""
