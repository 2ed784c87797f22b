"""Generic typed accessor for one named PocketBase collection.

Provides CRUD and auth-flow calls over a shared :class:`Session`. The
record shape is a type parameter; any type pydantic can validate (models,
dataclasses, TypedDicts, plain dicts) works as a record.
"""

import builtins
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from urllib.parse import quote

import structlog

from .types import (
    AuthMethods,
    AuthResponse,
    CreateResult,
    ExternalAuth,
    ListParams,
    ListResult,
    OAuth2Response,
    adapter,
)

if TYPE_CHECKING:
    from .session import Session

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Page size used by full_list when the caller leaves the default.
FULL_LIST_PAGE_SIZE = 500


class Collection(Generic[T]):
    """Typed accessor for records of one collection.

    Holds nothing but a reference to the session, the collection name and
    the record type, so any number of accessors may share one session.
    Every call authorizes through the session first and issues exactly one
    request (``full_list`` issues one per page).
    """

    def __init__(self, session: "Session", name: str, record_type: type[T] | Any = dict):
        """Initialize the accessor.

        Args:
            session: Shared session supplying endpoint, token and transport.
            name: Collection name or id.
            record_type: Type records are validated into and dumped from.
        """
        self._session = session
        self.name = name
        self.record_type = record_type
        self.base_path = f"/api/collections/{quote(name, safe='')}"

    @property
    def base_collection_url(self) -> str:
        """Absolute URL of the collection."""
        return self._session.base_url + self.base_path

    def _record_path(self, record_id: str = "") -> str:
        path = f"{self.base_path}/records"
        if record_id:
            path = f"{path}/{quote(record_id, safe='')}"
        return path

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, record: T) -> CreateResult:
        """Create a new record and return its id and metadata."""
        body = adapter(self.record_type).dump_python(record, mode="json", by_alias=True)
        response = self._session.request("create", "POST", self._record_path(), json=body)
        return self._session.decode("create", response, CreateResult)

    def update(self, record_id: str, record: T) -> None:
        """Patch an existing record.

        Only fields explicitly set on a model are sent.
        """
        body = adapter(self.record_type).dump_python(
            record, mode="json", by_alias=True, exclude_unset=True
        )
        self._session.request("update", "PATCH", self._record_path(record_id), json=body)

    def delete(self, record_id: str) -> None:
        self._session.request("delete", "DELETE", self._record_path(record_id))

    def one(self, record_id: str) -> T:
        """Fetch a single record by id."""
        response = self._session.request("one", "GET", self._record_path(record_id))
        return self._session.decode("one", response, self.record_type)

    def one_with_params(self, record_id: str, params: ListParams) -> T:
        """Fetch a single record by id, honoring ``fields`` and ``expand``."""
        query = {}
        if params.fields:
            query["fields"] = params.fields
        if params.expand:
            query["expand"] = params.expand
        response = self._session.request(
            "one", "GET", self._record_path(record_id), params=query
        )
        return self._session.decode("one", response, self.record_type)

    def list(self, params: ListParams | None = None) -> ListResult[T]:
        """Fetch one page of records."""
        params = params or ListParams()
        response = self._session.request(
            "list", "GET", self._record_path(), params=params.query()
        )
        return self._session.decode("list", response, ListResult[self.record_type])

    def full_list(self, params: ListParams | None = None) -> ListResult[T]:
        """Fetch every page and concatenate the items in server order.

        Paging starts at page 1 regardless of ``params.page`` and stops when a
        page comes back short or the reported total has been collected. A
        page is short relative to the server's ``perPage``, which may be
        capped below the requested size.
        """
        base = params or ListParams()
        size = base.size if "size" in base.model_fields_set else FULL_LIST_PAGE_SIZE

        items: list[T] = []
        page = 1
        while True:
            result = self.list(base.model_copy(update={"page": page, "size": size}))
            items.extend(result.items)
            page_size = result.per_page or size
            if (
                not result.items
                or len(result.items) < page_size
                or len(items) >= result.total_items
            ):
                break
            page += 1

        logger.debug(
            "Fetched full list",
            collection=self.name,
            pages=page,
            total_items=result.total_items,
        )
        return ListResult[self.record_type](
            page=1,
            per_page=size,
            total_items=result.total_items,
            total_pages=result.total_pages,
            items=items,
        )

    # ------------------------------------------------------------------
    # Auth flows
    # ------------------------------------------------------------------

    def list_auth_methods(self) -> AuthMethods:
        """Return the auth methods enabled on this auth collection."""
        response = self._session.request(
            "list-auth-methods", "GET", f"{self.base_path}/auth-methods"
        )
        return self._session.decode("list-auth-methods", response, AuthMethods)

    def auth_with_password(self, identity: str, password: str) -> AuthResponse:
        """Authenticate a record by username/email and password.

        On success the returned token replaces the session token.
        """
        response = self._session.request(
            "auth-with-password",
            "POST",
            f"{self.base_path}/auth-with-password",
            form={"identity": identity, "password": password},
        )
        result = self._session.decode("auth-with-password", response, AuthResponse)
        self._session.set_token(result.token)
        return result

    def auth_with_oauth2_code(
        self,
        provider: str,
        code: str,
        code_verifier: str,
        redirect_url: str,
    ) -> OAuth2Response:
        """Authenticate a record with an OAuth2 authorization code.

        On success the returned token replaces the session token.
        """
        response = self._session.request(
            "auth-with-oauth2",
            "POST",
            f"{self.base_path}/auth-with-oauth2",
            form={
                "provider": provider,
                "code": code,
                "codeVerifier": code_verifier,
                "redirectUrl": redirect_url,
            },
        )
        result = self._session.decode("auth-with-oauth2", response, OAuth2Response)
        self._session.set_token(result.token)
        return result

    def auth_refresh(self) -> AuthResponse:
        """Exchange the current record token for a fresh one.

        On success the returned token replaces the session token.
        """
        response = self._session.request(
            "auth-refresh", "POST", f"{self.base_path}/auth-refresh"
        )
        result = self._session.decode("auth-refresh", response, AuthResponse)
        self._session.set_token(result.token)
        return result

    def request_verification(self, email: str) -> None:
        self._post_form("request-verification", {"email": email})

    def confirm_verification(self, verification_token: str) -> None:
        self._post_form("confirm-verification", {"token": verification_token})

    def request_password_reset(self, email: str) -> None:
        self._post_form("request-password-reset", {"email": email})

    def confirm_password_reset(
        self,
        password_reset_token: str,
        password: str,
        password_confirm: str,
    ) -> None:
        self._post_form(
            "confirm-password-reset",
            {
                "token": password_reset_token,
                "password": password,
                "passwordConfirm": password_confirm,
            },
        )

    def request_email_change(self, new_email: str) -> None:
        """Ask for an email change of the authenticated record."""
        self._post_form("request-email-change", {"newEmail": new_email})

    def confirm_email_change(self, email_change_token: str, password: str) -> None:
        self._post_form(
            "confirm-email-change",
            {"token": email_change_token, "password": password},
        )

    def list_external_auths(self, record_id: str) -> builtins.list[ExternalAuth]:
        """List external auth providers linked to the given auth record."""
        response = self._session.request(
            "list-external-auths",
            "GET",
            f"{self._record_path(record_id)}/external-auths",
        )
        return self._session.decode("list-external-auths", response, list[ExternalAuth])

    def unlink_external_auth(self, record_id: str, provider: str) -> None:
        self._session.request(
            "unlink-external-auth",
            "DELETE",
            f"{self._record_path(record_id)}/external-auths/{quote(provider, safe='')}",
        )

    def _post_form(self, action: str, fields: dict[str, str]) -> None:
        self._session.request(action, "POST", f"{self.base_path}/{action}", form=fields)
