"""Exception types raised by the editor session package."""


class EditorSessionError(Exception):
    """Base class for editor session errors."""


class StorageError(EditorSessionError):
    """Raised when the local storage medium cannot complete an operation."""


class StorageQuotaExceededError(StorageError):
    """Raised when a write would exceed the storage capacity."""


class NoActiveSubjectError(EditorSessionError):
    """Raised when a session mutation is attempted without an active subject."""


class UnknownEditError(EditorSessionError):
    """Raised when an edit id is not part of the current session."""


class EditAlreadySavedError(EditorSessionError):
    """Raised when an edit that is already saved is saved again."""
