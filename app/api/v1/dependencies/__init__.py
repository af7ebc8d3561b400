"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the acting caller and
application use cases. Routes depend only on these, not on infra directly.
"""

from app.api.v1.dependencies.auth import (
    Actor,
    get_current_actor,
    require_roles,
)
from app.api.v1.dependencies.db import (
    get_laporan_repo,
    get_laporan_repo_for_write,
    get_user_directory_for_write,
)
from app.api.v1.dependencies.laporan import (
    get_attachment_mapper,
    get_laporan_query_service,
    get_laporan_workflow_service,
    get_storage,
)

__all__ = [
    "Actor",
    "get_attachment_mapper",
    "get_current_actor",
    "get_laporan_query_service",
    "get_laporan_repo",
    "get_laporan_repo_for_write",
    "get_laporan_workflow_service",
    "get_storage",
    "get_user_directory_for_write",
    "require_roles",
]
