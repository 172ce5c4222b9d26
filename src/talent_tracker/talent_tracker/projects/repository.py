from __future__ import annotations

from typing import Optional, Protocol

from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: str) -> Optional[Project]:
        raise NotImplementedError
