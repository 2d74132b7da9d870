"""Redis key patterns and builders with namespacing."""


class RedisKeys:
    """Centralized Redis key management."""

    PREFIX = "imgcache"

    @classmethod
    def artifact(cls, filter: str, path: str, prefix: str | None = None) -> str:
        """Hash holding one cached image (content, mime type, format)."""
        return f"{prefix or cls.PREFIX}:{filter}:{path.lstrip('/')}"
