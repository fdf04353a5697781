"""Error kinds raised by the sync engine and its collaborators.

Every error derives from ``SyncError`` so callers can catch the whole
family at once. The engine never retries: whichever stage raises aborts
the run and the error reaches the caller unchanged.
"""


class SyncError(Exception):
    """Base class for all sync failures."""


class InvalidFormatError(SyncError):
    """The requested target format is not a known format."""

    def __init__(self, format_name: str) -> None:
        super().__init__(f"{format_name} is not a valid format!")
        self.format_name = format_name


class FormatMismatchError(SyncError):
    """A reference file's extension belongs to a different format."""

    def __init__(self, found: str, requested: str) -> None:
        super().__init__(
            f"Format mismatch! Found {found} but requested {requested}!"
        )
        self.found = found
        self.requested = requested


class InvalidContentError(SyncError):
    """A codec could not parse or produce a file's content."""

    def __init__(
        self, format_name: str, reason: str, path: str | None = None
    ) -> None:
        message = f'Invalid content for "{format_name}" format!\n{reason}'
        if path:
            message += f"\n{path}"
        super().__init__(message)
        self.format_name = format_name
        self.path = path


class RemoteError(SyncError):
    """The remote service failed or reported an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FilesystemError(SyncError):
    """A local directory or file operation failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
