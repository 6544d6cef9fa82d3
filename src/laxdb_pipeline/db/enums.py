from __future__ import annotations

from enum import StrEnum


class EntityTypeEnum(StrEnum):
    TEAM = "team"
    PLAYER = "player"
    STANDING = "standing"
    GAME = "game"
