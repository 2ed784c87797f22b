"""Request parameter and response models for the PocketBase API.

Pydantic models mirroring the JSON documents the server returns. Field
names follow Python conventions and map to the server's camelCase keys
through aliases; unknown keys are kept where the server may add fields.
"""

from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

T = TypeVar("T")


@lru_cache(maxsize=128)
def adapter(model_type: Any) -> TypeAdapter:
    """Return a cached TypeAdapter for validating and dumping ``model_type``."""
    return TypeAdapter(model_type)


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ListParams(_ApiModel):
    """Query parameters for paged record listing.

    Empty values are not sent. ``one_with_params`` only uses ``fields`` and
    ``expand``.
    """

    page: int = Field(1, ge=1)
    size: int = Field(30, ge=1)
    sort: str = ""
    filter: str = ""
    expand: str = ""
    fields: str = ""

    def query(self) -> dict[str, Any]:
        """Build the query string mapping for a list request."""
        params: dict[str, Any] = {"page": self.page, "perPage": self.size}
        for name in ("sort", "filter", "expand", "fields"):
            if value := getattr(self, name):
                params[name] = value
        return params


class ListResult(_ApiModel, Generic[T]):
    """One page of records, or the concatenation of all pages."""

    page: int = 1
    per_page: int = Field(0, alias="perPage")
    total_items: int = Field(0, alias="totalItems")
    total_pages: int = Field(0, alias="totalPages")
    items: list[T] = Field(default_factory=list)


class CreateResult(_ApiModel):
    """Metadata of a freshly created record."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    created: str = ""
    updated: str = ""
    collection_id: str = Field("", alias="collectionId")
    collection_name: str = Field("", alias="collectionName")


class AuthProvider(_ApiModel):
    """OAuth2 provider offered by an auth collection."""

    name: str = ""
    display_name: str = Field("", alias="displayName")
    state: str = ""
    auth_url: str = Field("", alias="authUrl")
    code_verifier: str = Field("", alias="codeVerifier")
    code_challenge: str = Field("", alias="codeChallenge")
    code_challenge_method: str = Field("", alias="codeChallengeMethod")


class AuthMethods(_ApiModel):
    """Authentication methods enabled on an auth collection."""

    auth_providers: list[AuthProvider] = Field(default_factory=list, alias="authProviders")
    username_password: bool = Field(False, alias="usernamePassword")
    email_password: bool = Field(False, alias="emailPassword")
    only_verified: bool = Field(False, alias="onlyVerified")


class AuthRecord(_ApiModel):
    """Auth collection record returned alongside a token."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = ""
    collection_id: str = Field("", alias="collectionId")
    collection_name: str = Field("", alias="collectionName")
    created: str = ""
    updated: str = ""
    username: str = ""
    email: str = ""
    email_visibility: bool = Field(False, alias="emailVisibility")
    verified: bool = False
    name: str = ""
    avatar: str = ""


class AuthResponse(_ApiModel):
    """Envelope returned by password login and auth refresh."""

    token: str = Field(min_length=1)
    record: AuthRecord = Field(default_factory=AuthRecord)


class OAuth2Response(_ApiModel):
    """Envelope returned by OAuth2 code login."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    token: str = Field(min_length=1)


class TokenResponse(_ApiModel):
    """Envelope returned by admin login and the file token endpoint."""

    token: str = Field(min_length=1)


class ExternalAuth(_ApiModel):
    """External auth provider linked to an auth record."""

    id: str = ""
    created: str = ""
    updated: str = ""
    record_id: str = Field("", alias="recordId")
    collection_id: str = Field("", alias="collectionId")
    provider: str = ""
    provider_id: str = Field("", alias="providerId")


class BackupFileInfo(_ApiModel):
    """One backup archive stored on the server."""

    key: str
    size: int = 0
    modified: str = ""
