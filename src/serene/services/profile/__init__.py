"""Explicit user profile updates."""

from serene.services.profile.profile_service import ProfileService

__all__ = ["ProfileService"]
