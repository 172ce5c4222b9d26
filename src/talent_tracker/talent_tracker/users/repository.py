from __future__ import annotations

from typing import Optional, Protocol

from .model import Profile


class ProfileRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[Profile]:
        raise NotImplementedError
