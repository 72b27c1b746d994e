"""API helper utilities."""
from api.helpers.pagination import page_links

__all__ = [
    "page_links",
]
