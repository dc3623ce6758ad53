"""Shared test fixtures."""

import copy

import pytest

from sanity_ops.fixers import (
    cleanup_home_visible,
    ensure_home_page,
    fix_home_duplicate,
    migrate_contentitem_to_curso,
    publish_all_drafts,
    rename_type,
    seed_content_models,
    update_menu,
    update_slugs,
)
from sanity_ops.store.client import Patch, StoreError, Transaction
from sanity_ops.sync import home_sections


# ── In-memory store ──────────────────────────────────────────────────────


class FakeAssets:
    def __init__(self):
        self.uploads = []

    def upload(self, kind, data, filename=None, content_type=None):
        asset_id = f"image-{len(self.uploads) + 1}"
        self.uploads.append({"kind": kind, "data": data, "filename": filename, "_id": asset_id})
        return {"_id": asset_id}


class FakeStore:
    """
    Dict-backed stand-in for SanityClient.

    Writes go through the real Patch/Transaction builders and land in
    mutate(); every successful mutate call is recorded in `commits`.
    Queries are answered by handlers keyed on the exact query string.
    """

    def __init__(self, docs=None):
        self.docs = {}
        self.commits = []
        self.queries = []
        self.fail_on_write = set()
        self.assets = FakeAssets()
        self.query_handlers = dict(DEFAULT_QUERY_HANDLERS)
        for doc in docs or []:
            self.add(doc)

    def add(self, doc):
        self.docs[doc["_id"]] = copy.deepcopy(doc)
        return doc

    # reads

    def fetch(self, query, params=None):
        self.queries.append((query, params))
        handler = self.query_handlers.get(query)
        if handler is None:
            raise AssertionError(f"Unexpected query: {query}")
        return copy.deepcopy(handler(self, params or {}))

    def get_document(self, doc_id):
        return copy.deepcopy(self.docs.get(doc_id))

    # writes

    def patch(self, doc_id):
        return Patch(self, doc_id)

    def transaction(self):
        return Transaction(self)

    def create(self, doc):
        self.mutate([{"create": doc}])
        return doc

    def create_or_replace(self, doc):
        self.mutate([{"createOrReplace": doc}])
        return doc

    def delete(self, doc_id):
        return self.mutate([{"delete": {"id": doc_id}}])

    def mutate(self, mutations):
        staged = copy.deepcopy(self.docs)
        for mutation in mutations:
            self._apply(staged, mutation)
        self.docs = staged
        self.commits.append(copy.deepcopy(mutations))
        return {"results": [{"id": _mutation_id(m)} for m in mutations]}

    def _apply(self, docs, mutation):
        kind, body = next(iter(mutation.items()))
        doc_id = _mutation_id(mutation)
        if doc_id in self.fail_on_write:
            raise StoreError(f"Mutate failed 500: cannot write {doc_id}", status_code=500)

        if kind == "create":
            if doc_id in docs:
                raise StoreError(f"Mutate failed 409: {doc_id} exists", status_code=409)
            docs[doc_id] = copy.deepcopy(body)
        elif kind == "createOrReplace":
            docs[doc_id] = copy.deepcopy(body)
        elif kind == "delete":
            docs.pop(doc_id, None)
        elif kind == "patch":
            if doc_id not in docs:
                raise StoreError(f"Mutate failed 404: {doc_id} not found", status_code=404)
            doc = docs[doc_id]
            for key in body.get("unset", []):
                doc.pop(key, None)
            doc.update(copy.deepcopy(body.get("set", {})))
        else:
            raise AssertionError(f"Unknown mutation {kind}")

    # helpers for assertions

    def section(self, section_type, doc_id=home_sections.HOME_ID):
        for section in self.docs[doc_id].get("sections") or []:
            if section.get("type") == section_type:
                return section
        return None

    def section_refs(self, section_type, doc_id=home_sections.HOME_ID):
        section = self.section(section_type, doc_id) or {}
        return [ref["_ref"] for ref in section.get("courses") or []]


def _mutation_id(mutation):
    kind, body = next(iter(mutation.items()))
    if kind in ("create", "createOrReplace"):
        return body.get("_id")
    return body.get("id")


# ── Query handlers ───────────────────────────────────────────────────────


def _docs(store, predicate):
    return [doc for doc in store.docs.values() if predicate(doc)]


def _slug(doc):
    return (doc.get("slug") or {}).get("current")


def _is_draft(doc):
    return doc["_id"].startswith("drafts.")


def _home_query(store, params):
    doc = store.docs.get(home_sections.HOME_ID)
    if not doc or doc.get("_type") != "page":
        return None
    return {"_id": doc["_id"], "sections": doc.get("sections")}


def _content_query(store, params):
    return [
        {"_id": d["_id"], "type": d.get("type"), "featuredInHome": d.get("featuredInHome")}
        for d in _docs(store, lambda d: d.get("_type") in home_sections.CONTENT_TYPES)
    ]


def _first(items):
    return items[0] if items else None


DEFAULT_QUERY_HANDLERS = {
    home_sections.HOME_QUERY: _home_query,
    home_sections.CONTENT_QUERY: _content_query,
    fix_home_duplicate.HOME_DRAFTS_QUERY: lambda s, p: _docs(
        s, lambda d: d.get("_type") == "page" and _slug(d) == "home" and _is_draft(d)
    ),
    rename_type.DOCS_BY_TYPE_QUERY: lambda s, p: [
        {"_id": d["_id"]} for d in _docs(s, lambda d: d.get("_type") == p["type"])
    ],
    update_slugs.CLASS_DOCS_QUERY: lambda s, p: [
        {"_id": d["_id"], "slug": d.get("slug")}
        for d in _docs(s, lambda d: d.get("_type") == p["type"] and d.get("type") == "class")
    ],
    update_menu.MENU_QUERY: lambda s, p: _first(_docs(s, lambda d: d.get("_type") == "siteMenu")),
    ensure_home_page.HOME_PAGE_QUERY: lambda s, p: _first([
        {"_id": d["_id"]} for d in _docs(s, lambda d: d.get("_type") == "page" and _slug(d) == "home")
    ]),
    cleanup_home_visible.FLAGGED_HOME_QUERY: lambda s, p: [
        d["_id"] for d in _docs(
            s, lambda d: d.get("_type") == "page" and _slug(d) == "home" and ("visible" in d or "deleted" in d)
        )
    ],
    migrate_contentitem_to_curso.PUBLISHED_CONTENT_ITEMS_QUERY: lambda s, p: _docs(
        s, lambda d: d.get("_type") == "contentItem" and not _is_draft(d)
    ),
    migrate_contentitem_to_curso.PAGES_QUERY: lambda s, p: [
        {"_id": d["_id"], "sections": d.get("sections")} for d in _docs(s, lambda d: d.get("_type") == "page")
    ],
    seed_content_models.LEGACY_CURSO_QUERY: lambda s, p: _docs(s, lambda d: d.get("_type") == "curso"),
    seed_content_models.PAGE_BY_SLUG_QUERY: lambda s, p: _first([
        {k: d.get(k) for k in ("_id", "_type", "title", "slug", "sections", "seo")}
        for d in _docs(
            s, lambda d: d.get("_type") == "page" and not _is_draft(d) and _slug(d) == p["slug"]
        )
    ]),
    publish_all_drafts.DRAFT_IDS_QUERY: lambda s, p: [
        {"_id": d["_id"]} for d in _docs(s, _is_draft)
    ],
    publish_all_drafts.DOC_BY_ID_QUERY: lambda s, p: s.docs.get(p["id"]),
}


# ── Fixtures ─────────────────────────────────────────────────────────────


def make_home(courses=None, courses2=None, extra_sections=None):
    sections = list(extra_sections or [])
    if courses is not None:
        sections.append({
            "_type": "coursesSection", "type": "courses",
            "courses": [{"_type": "reference", "_ref": ref} for ref in courses],
        })
    if courses2 is not None:
        sections.append({
            "_type": "courses2Section", "type": "courses2",
            "courses": [{"_type": "reference", "_ref": ref} for ref in courses2],
        })
    return {
        "_id": "page-home",
        "_type": "page",
        "title": "Inicio",
        "slug": {"_type": "slug", "current": "home"},
        "sections": sections,
    }


def make_content(doc_id, category, featured=False, doc_type=None):
    doc_type = doc_type or {
        "class": "classContent",
        "workshop": "workshopContent",
        "private": "privateReservationContent",
        "gift-card": "giftCardContent",
    }[category]
    return {
        "_id": doc_id,
        "_type": doc_type,
        "type": category,
        "title": doc_id.replace("-", " ").title(),
        "slug": {"_type": "slug", "current": doc_id},
        "featuredInHome": featured,
    }


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def home_store():
    """Store with an empty-sectioned home page and one workshop + one class."""
    return FakeStore([
        make_home(courses=[], courses2=[]),
        make_content("workshop-raku", "workshop"),
        make_content("class-torno", "class"),
    ])


class FakeResponse:
    def __init__(self, status_code=200, content=b"", json_data=None, headers=None, text=""):
        self.status_code = status_code
        self.content = content
        self._json = json_data
        self.headers = headers or {}
        self.text = text

    def json(self):
        return self._json


class FakeImageSession:
    """requests.Session stand-in for image downloads."""

    def __init__(self, failing=None):
        self.failing = set(failing or [])
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if url in self.failing:
            return FakeResponse(status_code=404, text="Not Found")
        return FakeResponse(content=f"bytes:{url}".encode(), headers={"Content-Type": "image/jpeg"})


@pytest.fixture
def image_session():
    return FakeImageSession()
