"""Engine error taxonomy.

Only ConfigError is fatal.  Everything else is recovered where it happens:
logged, reported on the event bus, and the operation becomes a no-op.
"""


class AvatarError(Exception):
    """Base class for all engine errors."""


class ConfigError(AvatarError, ValueError):
    """The catalog document is malformed or has unresolved references."""


class LookupMiss(AvatarError, LookupError):
    """A named catalog record or scene node could not be found."""

    kind = "entry"

    def __init__(self, name: str, detail: str = ""):
        self.name = name
        message = f"unknown {self.kind}: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class UnknownBody(LookupMiss):
    kind = "body"


class UnknownItem(LookupMiss):
    kind = "item"


class UnknownSkin(LookupMiss):
    kind = "skin"


class MissingBody(AvatarError):
    """A loaded bundle contains no body payload."""


class NoAnimation(AvatarError):
    """A body model has no animation clip to bind."""


class IncompleteSkin(AvatarError):
    """A skin is missing one or more of its three textures."""

    def __init__(self, name: str, missing: tuple[str, ...]):
        self.name = name
        self.missing = missing
        super().__init__(f"skin {name} is missing textures: {', '.join(missing)}")


class AssetLoadError(AvatarError):
    """A model or texture fetch failed.  Never retried."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        super().__init__(f"failed to load {url}" + (f": {reason}" if reason else ""))
