"""
Pydantic request schemas for API endpoints.
"""

from pydantic import BaseModel, Field


class PurgeRequest(BaseModel):
    """
    Request to purge one scope.

    The name is passed to the engine exactly as sent. A missing, blank or
    padded name is an unknown scope and comes back as a 400 purge response.
    """

    scope: str = Field("", description="Registered scope name, matched exactly")

    model_config = {"extra": "forbid"}
