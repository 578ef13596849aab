"""
Exceptions raised by the store, auth and action layers.
"""


class FolioError(Exception):
    """Base class for errors raised by this package."""


class NotFoundError(FolioError):
    pass


class SlugConflictError(FolioError):
    def __init__(self, slug: str):
        super().__init__(f'Slug "{slug}" is already in use.')
        self.slug = slug


class AuthError(FolioError):
    """Sign-in or session verification failed."""


class AdminLoginRequired(FolioError):
    """Raised by the admin dependency; rendered as a redirect to the login page."""

    def __init__(self, next_path: str = "/admin/dashboard"):
        super().__init__("Admin login required")
        self.next_path = next_path


class ImageUploadError(FolioError):
    pass


class SiteUnderMaintenance(FolioError):
    """Raised for public pages while maintenance mode is switched on."""
