"""Records exchanged with the CodeGrinder server."""

from dataclasses import dataclass

from grind.errors import ProtocolError


@dataclass
class ServerVersion:
    """Version information advertised by the server at ``/version``.

    Attributes:
        version: The server's own version
        grind_version_required: Oldest grind release the server accepts
        grind_version_recommended: Release users should be running
    """

    grind_version_required: str
    grind_version_recommended: str
    version: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ServerVersion":
        """Create a ServerVersion from the server's JSON object.

        Raises:
            ProtocolError: If a grind version threshold is missing or not a string.
        """
        if not isinstance(data, dict):
            raise ProtocolError(f"expected a version object from the server, got {data!r}")
        values = {"version": data.get("version", "")}
        for attr, key in (
            ("grind_version_required", "grindVersionRequired"),
            ("grind_version_recommended", "grindVersionRecommended"),
        ):
            value = data.get(key)
            if not isinstance(value, str):
                raise ProtocolError(f"server version object has no valid {key!r} field")
            values[attr] = value
        return cls(**values)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "grindVersionRequired": self.grind_version_required,
            "grindVersionRecommended": self.grind_version_recommended,
        }


@dataclass
class User:
    """The authenticated user, as returned by ``/users/me``."""

    id: int
    name: str
    email: str | None = None
    admin: bool = False
    author: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        if not isinstance(data, dict) or "id" not in data:
            raise ProtocolError(f"expected a user object from the server, got {data!r}")
        try:
            user_id = int(data["id"])
        except (TypeError, ValueError) as e:
            raise ProtocolError(f"user object has an invalid id: {data['id']!r}") from e
        return cls(
            id=user_id,
            name=data.get("name", ""),
            email=data.get("email"),
            admin=bool(data.get("admin", False)),
            author=bool(data.get("author", False)),
        )

    def __str__(self) -> str:
        if self.email:
            return f"{self.name} <{self.email}>"
        return self.name
