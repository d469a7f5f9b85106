"""
Nighthawk adapter API response models.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RegistrationStatus(BaseModel):
    """State of the background registration tasks."""

    running: bool
    bootstrap_completed: bool
    bootstrap_succeeded: Optional[bool] = None
    scheduler_state: str
    last_outcome: Optional[str] = None
    last_cycle_at: Optional[str] = None
    cycles_run: int = 0
    failed_tasks: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Detailed health of the adapter."""

    status: str
    service: str
    instance_id: str
    version: str
    git_sha: str
    latest_component_version: str
    started_at: str
    registration: RegistrationStatus


class CapabilitiesResponse(BaseModel):
    """Capability set currently available to advertise."""

    instance_id: str
    count: int
    versions: Dict[str, List[Dict[str, Any]]] = Field(
        default_factory=dict, description="Component definitions keyed by version"
    )
