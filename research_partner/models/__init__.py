"""Database models"""
from research_partner.models.user import User, IdentityState, identity_state

__all__ = ["User", "IdentityState", "identity_state"]
