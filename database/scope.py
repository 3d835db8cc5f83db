"""
Request scope: who a todo operation is performed for.

``Guest`` covers unauthenticated traffic and only ever sees rows with a
NULL owner; ``Owned`` carries an authenticated user id and only ever sees
that user's rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Guest:
    @property
    def owner_id(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class Owned:
    user_id: int

    @property
    def owner_id(self) -> Optional[int]:
        return self.user_id


RequestScope = Union[Guest, Owned]

GUEST = Guest()
