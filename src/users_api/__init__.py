"""Users API.

REST service managing user records on a relational store, with pagination,
search and aggregate statistics.
"""

__version__ = "0.1.0"
