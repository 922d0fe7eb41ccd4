"""OP3 data source helpers.

Fetches the show record and download rows from the OP3 API, stores fetched
row sets as local JSON snapshots, and manages the OP3 analytics prefix on
enclosure URLs.
"""
