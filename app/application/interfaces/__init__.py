"""Application interfaces (ports): repository and storage protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    ILaporanRepository,
    IUserDirectory,
)
from app.application.interfaces.storage import IStorageService

__all__ = [
    "ILaporanRepository",
    "IStorageService",
    "IUserDirectory",
]
