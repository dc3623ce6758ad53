"""
Base document actions (publish, delete) run outside the Studio.

These are the authoritative operations the publish hook decorates. Each
action is a callable taking ActionProps and returning a result dict with
an `on_handle` callable, or None when the action does not apply.
"""

from sanity_ops.store.client import draft_id, normalize_id, strip_system_fields


class PublishAction:
    """
    Publish a document: copy its draft over the published id and drop the draft.

    Does not call props.on_complete(); the publish hook signals completion
    once its sync step has run.
    """

    action = "publish"
    label = "Publish"

    def __init__(self, client):
        self.client = client

    def __call__(self, props):
        published_id = normalize_id(props.id)

        def on_handle():
            draft = self.client.get_document(draft_id(published_id))
            if not draft:
                print(f"  [SKIP] {published_id}: no draft to publish")
                return None

            doc = {**strip_system_fields(draft), "_id": published_id}
            self.client.transaction().create_or_replace(doc).delete(draft["_id"]).commit()
            print(f"  [OK] Published {published_id}")
            return doc

        return {"label": self.label, "on_handle": on_handle}


class DeleteAction:
    """Delete both the published document and its draft."""

    action = "delete"
    label = "Delete"

    def __init__(self, client):
        self.client = client

    def __call__(self, props):
        published_id = normalize_id(props.id)

        def on_handle():
            self.client.transaction().delete(published_id).delete(draft_id(published_id)).commit()
            print(f"  [OK] Deleted {published_id}")
            props.on_complete()

        return {"label": self.label, "on_handle": on_handle}


def default_document_actions(client) -> list:
    return [PublishAction(client), DeleteAction(client)]
