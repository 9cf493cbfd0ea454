"""Student registration form, insert handler and listing page."""

__version__ = "1.0.0"
