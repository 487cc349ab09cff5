"""Custom exception hierarchy for HNScribe."""


class HNScribeError(Exception):
    """Base exception for all HNScribe errors."""

    def __init__(self, message: str = "An error occurred in HNScribe"):
        self.message = message
        super().__init__(self.message)


class InvalidUrlError(HNScribeError):
    """Input is not a Hacker News item URL. Raised before any network I/O."""

    def __init__(self, message: str = "Invalid Hacker News item URL"):
        super().__init__(message)


class NetworkError(HNScribeError):
    """Base exception for network-related errors."""

    def __init__(self, message: str = "A network error occurred"):
        super().__init__(message)


class NetworkFailureError(NetworkError):
    """Transport-level failure while fetching the root item or page."""

    def __init__(self, message: str = "Failed to fetch data from Hacker News"):
        super().__init__(message)


class ItemNotFoundError(NetworkError):
    """The requested item does not exist."""

    def __init__(self, message: str = "Item not found"):
        super().__init__(message)


class SubtreeFetchError(NetworkError):
    """A descendant comment could not be fetched. Its subtree is dropped."""

    def __init__(self, message: str = "Failed to fetch comment subtree"):
        super().__init__(message)


class AcquisitionCancelledError(HNScribeError):
    """The caller cancelled the acquisition."""

    def __init__(self, message: str = "Acquisition cancelled"):
        super().__init__(message)


class EmptyResultError(HNScribeError):
    """Neither the item API nor the item page produced any comments."""

    def __init__(self, message: str = "No comments found or unable to parse the page"):
        super().__init__(message)


class RenderError(HNScribeError):
    """The comment tree handed to the renderer is malformed."""

    def __init__(self, message: str = "Failed to render comment tree"):
        super().__init__(message)


class DataError(HNScribeError):
    """Base exception for data-related errors."""

    def __init__(self, message: str = "A data error occurred"):
        super().__init__(message)


class NoteStorageError(DataError):
    """Writing the note to disk failed."""

    def __init__(self, message: str = "Failed to save note"):
        super().__init__(message)


class ConfigError(DataError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message)
