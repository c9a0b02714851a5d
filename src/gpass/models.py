"""
Data models for GPass login records.

The backend speaks Go-style capitalised JSON (``ID``, ``URL``, ``Username``,
``Password``). Models accept those names on input and emit them again with
``to_wire()``, while Python code uses snake_case attributes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class Credential(BaseModel):
    """
    A stored login record.

    Identity is ``id``; it is unique within a collection snapshot. ``url`` is
    the address exactly as stored, not a normalized lookup key. Extra server
    fields (timestamps, title) are ignored.

    Attributes:
        id: Server-assigned opaque identifier
        url: Full, possibly scheme-prefixed address
        username: Login name or email
        password: The secret, hidden from repr and logs
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: int | str = Field(alias="ID")
    url: str = Field(default="", alias="URL")
    username: str = Field(default="", alias="Username")
    password: SecretStr = Field(default=SecretStr(""), alias="Password")

    @field_validator("url", "username", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    def reveal(self) -> str:
        """Return the plaintext password."""
        return self.password.get_secret_value()

    def matches(self, fragment: str) -> bool:
        """Case-insensitive substring match on ``url``; empty fragment matches all."""
        if not fragment:
            return True
        return fragment.casefold() in self.url.casefold()


class NewCredential(BaseModel):
    """Payload for creating a login. An empty password asks the server to generate one."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(alias="URL")
    username: str = Field(alias="Username")
    password: SecretStr = Field(default=SecretStr(""), alias="Password")

    def to_wire(self) -> dict[str, str]:
        return {
            "URL": self.url,
            "Username": self.username,
            "Password": self.password.get_secret_value(),
        }


class LoginPage(BaseModel):
    """One page of the ``GET /logins/`` envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data: list[Credential] = Field(default_factory=list, alias="Data")
    total_data: int | None = Field(default=None, alias="TotalData")
    filtered_data: int | None = Field(default=None, alias="FilteredData")

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value: object) -> object:
        # Go marshals an empty result slice as null
        return [] if value is None else value


CollectionSnapshot = tuple[Credential, ...]
