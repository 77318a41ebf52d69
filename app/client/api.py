# app/client/api.py
import logging
import uuid
from typing import Any, Iterable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class APIError(Exception):
    """
    Non-2xx answer from the storefront API.

    `message` is taken from the response's `message` or `detail`;
    `errors` carries the field errors of a 422 or the per-item errors of
    an order / upload rejection.
    """

    def __init__(self, status_code: int, message: str, errors: list | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        try:
            body = response.json()
        except ValueError:
            body = None

        message = response.reason_phrase or "Request failed"
        errors: list = []

        if isinstance(body, dict):
            if isinstance(body.get("errors"), list):
                errors = body["errors"]
            detail = body.get("detail")
            if isinstance(body.get("message"), str):
                message = body["message"]
            elif isinstance(detail, str):
                message = detail
            elif isinstance(detail, dict):
                message = detail.get("message", message)
                errors = detail.get("errors") or detail.get("items") or errors
            elif isinstance(detail, list):
                message = "Validation failed"
                errors = detail

        return cls(response.status_code, message, errors)


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    return {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in params.items() if v is not None}


class StorefrontAPI:
    """
    Thin synchronous wrapper over the REST API.

    The session cookie set by /login is kept by the underlying
    `httpx.Client`; a bearer `token` can be given instead.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else None
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "StorefrontAPI":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.client.request(method, path, **kwargs)
        if response.is_error:
            err = APIError.from_response(response)
            logger.info("%s %s failed: %s", method, path, err)
            raise err
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ---- auth ----

    def login(self, email: str, password: str) -> dict:
        body = self._request("POST", "/login", json={"email": email, "password": password})
        return body["user"]

    def signup(self, email: str, password: str, name: str, **profile) -> dict:
        payload = {"email": email, "password": password, "name": name, **profile}
        body = self._request("POST", "/signup", json=payload)
        return body["user"]

    def logout(self) -> dict:
        try:
            return self._request("POST", "/logout")
        finally:
            self.client.cookies.clear()

    def verify_token(self) -> dict:
        return self._request("GET", "/verify-token")

    # ---- catalog ----

    def list_products(
        self,
        page: int = 1,
        limit: int = 24,
        category: uuid.UUID | str | None = None,
        stock: str | None = None,
        sort: str | None = None,
    ) -> dict:
        params = _clean_params(
            {"page": page, "limit": limit, "category": category, "stock": stock, "sort": sort}
        )
        return self._request("GET", "/products", params=params)

    def search_products(self, q: str, page: int = 1, limit: int = 20) -> dict:
        return self._request(
            "GET", "/products/search", params={"q": q, "page": page, "limit": limit}
        )

    def get_product(self, product_id: uuid.UUID | str) -> dict:
        return self._request("GET", f"/products/{product_id}")

    def list_categories(self, search: str | None = None) -> list[dict]:
        return self._request("GET", "/categories", params=_clean_params({"search": search}))

    def check_stock(self, lines: Iterable[tuple[uuid.UUID | str, int]]) -> dict:
        payload = {"products": [{"product_id": str(pid), "quantity": qty} for pid, qty in lines]}
        return self._request("POST", "/cart/check-stock", json=payload)

    def sync_cart(self, lines: Iterable[tuple[uuid.UUID | str, int]]) -> dict:
        """Merge local cart lines into the account's server cart."""
        payload = {"products": [{"product_id": str(pid), "quantity": qty} for pid, qty in lines]}
        return self._request("POST", "/cart/sync", json=payload)

    # ---- orders ----

    def create_order(
        self,
        products: Iterable[tuple[uuid.UUID | str, int]],
        address: str | None = None,
        city: str | None = None,
        phone: str | None = None,
    ) -> dict:
        payload: dict[str, Any] = {
            "products": [{"id": str(pid), "quantity": qty} for pid, qty in products],
        }
        payload.update(_clean_params({"address": address, "city": city, "phone": phone}))
        return self._request("POST", "/orders", json=payload)

    def my_orders(self, page: int = 1, limit: int = 20) -> dict:
        return self._request("GET", "/orders/me", params={"page": page, "limit": limit})

    # ---- media (admin) ----

    def list_media(self, page: int = 1, limit: int = 50) -> dict:
        return self._request("GET", "/media", params={"page": page, "limit": limit})

    def upload_media(self, files: Iterable[tuple[str, bytes, str]]) -> dict:
        """
        Args:
            files: (file_name, content, content_type) triples
        """
        multipart = [("images", (name, content, ctype)) for name, content, ctype in files]
        return self._request("POST", "/media/upload", files=multipart)

    def delete_media(self, media_id: uuid.UUID | str) -> dict:
        return self._request("DELETE", f"/media/{media_id}")

    def bulk_delete_media(self, ids: Iterable[uuid.UUID | str]) -> dict:
        return self._request("DELETE", "/media/bulk", json={"ids": [str(i) for i in ids]})

    # ---- users (admin) ----

    def all_users(self) -> dict:
        return self._request("GET", "/all-users")

    def update_user_role(self, user_id: uuid.UUID | str, role: str) -> dict:
        return self._request("PATCH", f"/users/{user_id}/role", json={"role": role})
