"""
Sanity Content API client.

Thin wrapper over the HTTP API (query, doc, mutate, assets). Mirrors the
subset of @sanity/client the studio scripts rely on:

    client.fetch(query, params)
    client.get_document(id)
    client.patch(id).set({...}).unset([...]).commit()
    client.transaction().patch(id, {"set": {...}}).delete(id).commit()
    client.create_or_replace(doc) / client.create(doc) / client.delete(id)
    client.assets.upload("image", data, filename="x.jpg")

Draft documents share the logical identity of their published version and
differ only by the "drafts." id prefix.
"""

import json
from typing import Any, Optional

import requests

# =============================================================================
# CONFIGURATION
# =============================================================================

DRAFTS_PREFIX = "drafts."
DEFAULT_TIMEOUT = 30

# Mutations are applied synchronously so a follow-up query sees them
MUTATE_PARAMS = {"returnIds": "true", "visibility": "sync"}


class StoreError(Exception):
    """Raised when the Sanity API returns a non-success status."""

    def __init__(self, message: str, status_code: int = None, body: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


# =============================================================================
# ID HELPERS
# =============================================================================


def normalize_id(doc_id: Optional[str]) -> Optional[str]:
    """Strip the drafts. prefix. Empty/None ids are returned unchanged."""
    if not doc_id:
        return doc_id
    if doc_id.startswith(DRAFTS_PREFIX):
        return doc_id[len(DRAFTS_PREFIX):]
    return doc_id


def draft_id(doc_id: str) -> str:
    return f"{DRAFTS_PREFIX}{normalize_id(doc_id)}"


def is_draft(doc_id: Optional[str]) -> bool:
    return bool(doc_id) and doc_id.startswith(DRAFTS_PREFIX)


# Server-managed fields dropped when a document is copied to a new id
SYSTEM_FIELDS = ("_rev", "_createdAt", "_updatedAt")


def strip_system_fields(doc: dict) -> dict:
    return {key: value for key, value in doc.items() if key not in SYSTEM_FIELDS}


# =============================================================================
# MUTATION BUILDERS
# =============================================================================


class Patch:
    """Builder for a single patch mutation (client.patch(id))."""

    def __init__(self, client: "SanityClient", doc_id: str):
        self.client = client
        self.doc_id = doc_id
        self.operations = {}

    def set(self, fields: dict) -> "Patch":
        self.operations.setdefault("set", {}).update(fields)
        return self

    def unset(self, keys: list) -> "Patch":
        self.operations.setdefault("unset", []).extend(keys)
        return self

    def serialize(self) -> dict:
        return {"patch": {"id": self.doc_id, **self.operations}}

    def commit(self) -> dict:
        return self.client.mutate([self.serialize()])


class Transaction:
    """Builder for an all-or-nothing batch of mutations."""

    def __init__(self, client: "SanityClient"):
        self.client = client
        self.mutations = []

    def patch(self, doc_id: str, operations: dict) -> "Transaction":
        self.mutations.append({"patch": {"id": doc_id, **operations}})
        return self

    def create(self, doc: dict) -> "Transaction":
        self.mutations.append({"create": doc})
        return self

    def create_or_replace(self, doc: dict) -> "Transaction":
        self.mutations.append({"createOrReplace": doc})
        return self

    def delete(self, doc_id: str) -> "Transaction":
        self.mutations.append({"delete": {"id": doc_id}})
        return self

    def __len__(self):
        return len(self.mutations)

    def commit(self) -> Optional[dict]:
        """Commit all queued mutations in one request. Empty transactions are not sent."""
        if not self.mutations:
            return None
        return self.client.mutate(self.mutations)


# =============================================================================
# ASSETS
# =============================================================================


class AssetsClient:
    """Binary asset uploads (images/files)."""

    def __init__(self, client: "SanityClient"):
        self.client = client

    def upload(self, kind: str, data: bytes, filename: str = None, content_type: str = None) -> dict:
        """Upload bytes and return the asset document (its _id is the stable reference)."""
        if kind not in ("image", "file"):
            raise ValueError(f"Unknown asset kind: {kind}")

        url = f"{self.client.base_url}/assets/{kind}s/{self.client.dataset}"
        params = {"filename": filename} if filename else {}
        headers = {"Content-Type": content_type or "application/octet-stream"}

        response = self.client.session.post(
            url, params=params, data=data, headers=headers, timeout=self.client.timeout
        )
        body = self.client._check(response, "Asset upload")
        return body.get("document", body)


# =============================================================================
# SANITY CLIENT
# =============================================================================


class SanityClient:
    """Sanity Content API client for read and write operations."""

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str,
        api_version: str = "2024-01-15",
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session = None,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = f"https://{project_id}.api.sanity.io/v{api_version}"
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})
        self.assets = AssetsClient(self)

    def _check(self, response, action: str) -> dict:
        if response.status_code < 200 or response.status_code >= 300:
            raise StoreError(
                f"{action} failed {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.json()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def fetch(self, query: str, params: dict = None) -> Any:
        """Run a GROQ query and return its result."""
        url = f"{self.base_url}/data/query/{self.dataset}"
        query_params = {"query": query}
        for name, value in (params or {}).items():
            query_params[f"${name}"] = json.dumps(value)

        response = self.session.get(url, params=query_params, timeout=self.timeout)
        return self._check(response, "Query").get("result")

    def get_document(self, doc_id: str) -> Optional[dict]:
        url = f"{self.base_url}/data/doc/{self.dataset}/{doc_id}"
        response = self.session.get(url, timeout=self.timeout)
        documents = self._check(response, "Get document").get("documents") or []
        return documents[0] if documents else None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def mutate(self, mutations: list) -> dict:
        """Send a list of mutations as one atomic request."""
        url = f"{self.base_url}/data/mutate/{self.dataset}"
        response = self.session.post(
            url,
            params=MUTATE_PARAMS,
            json={"mutations": mutations},
            timeout=self.timeout,
        )
        return self._check(response, "Mutate")

    def patch(self, doc_id: str) -> Patch:
        return Patch(self, doc_id)

    def transaction(self) -> Transaction:
        return Transaction(self)

    def create(self, doc: dict) -> dict:
        result = self.mutate([{"create": doc}])
        return {**doc, "_id": _first_result_id(result) or doc.get("_id")}

    def create_or_replace(self, doc: dict) -> dict:
        self.mutate([{"createOrReplace": doc}])
        return doc

    def delete(self, doc_id: str) -> dict:
        return self.mutate([{"delete": {"id": doc_id}}])


def _first_result_id(result: dict) -> Optional[str]:
    results = (result or {}).get("results") or []
    if results:
        return results[0].get("id")
    return None
