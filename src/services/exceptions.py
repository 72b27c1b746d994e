"""Shared exceptions for service layer operations."""


class NotFoundError(Exception):
    """Base class for lookups of a post or tag id that doesn't exist."""


class PostNotFoundError(NotFoundError):
    """Raised when a post is not found."""

    def __init__(self, post_id: int) -> None:
        self.post_id = post_id
        super().__init__(f"Bookmark {post_id} not found")


class TagNotFoundError(NotFoundError):
    """Raised when a tag is not found."""

    def __init__(self, tag_id: int) -> None:
        self.tag_id = tag_id
        super().__init__(f"Tag {tag_id} not found")


class ConflictError(Exception):
    """Base class for writes that collide with existing data."""


class DuplicateUrlError(ConflictError):
    """Raised when a bookmark with the same URL already exists."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"A bookmark with URL '{url}' already exists")


class InvalidInputError(Exception):
    """
    Raised for input that can't be tolerated.

    Most malformed input is normalized away instead; this is only used where
    there is nothing sensible to fall back to (e.g. an import document that is
    neither a list nor a paginated result object).
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
