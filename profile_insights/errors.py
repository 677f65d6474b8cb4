"""
Exceptions raised by the profile loader and parser.
"""


class ProfileError(Exception):
    """Base class for every error raised by profile_insights."""


class MalformedInput(ProfileError):
    """The profile text or structure cannot be analysed."""


class SourceReadError(ProfileError):
    """Raw profile bytes could not be acquired (file, stdin or URL)."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"Cannot read profile from {location}: {reason}")
        self.location = location
        self.reason = reason
