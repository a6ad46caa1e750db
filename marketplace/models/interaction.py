from enum import Enum


class InteractionAction(str, Enum):
    VIEW = "view"
    SAVE = "save"
    SHARE = "share"
    SEARCH = "search"
