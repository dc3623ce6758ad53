"""Tests for the base document actions and the home sync CLI commands."""

from unittest import mock

import pytest

from conftest import FakeStore, make_content, make_home
from sanity_ops.sync import cli
from sanity_ops.sync.actions import DeleteAction, PublishAction, default_document_actions
from sanity_ops.sync.publish_hook import FAILED, SYNCED, ActionProps


def props_for(doc_id, schema_type="classContent"):
    return ActionProps(id=doc_id, schema_type=schema_type, get_client=mock.Mock(), on_complete=mock.Mock())


class TestPublishAction:

    def test_copies_draft_and_removes_it(self, store):
        store.add({**make_content("drafts.c1", "class"), "_rev": "abc"})

        published = PublishAction(store)(props_for("drafts.c1"))["on_handle"]()

        assert published["_id"] == "c1"
        assert "_rev" not in store.docs["c1"]
        assert "drafts.c1" not in store.docs
        assert len(store.commits) == 1

    def test_no_draft_is_skipped(self, store):
        assert PublishAction(store)(props_for("c1"))["on_handle"]() is None
        assert store.commits == []

    def test_does_not_signal_completion(self, store):
        store.add(make_content("drafts.c1", "class"))
        props = props_for("c1")
        PublishAction(store)(props)["on_handle"]()
        props.on_complete.assert_not_called()


class TestDeleteAction:

    def test_deletes_published_and_draft(self, store):
        store.add(make_content("c1", "class"))
        store.add(make_content("drafts.c1", "class"))
        props = props_for("c1")

        DeleteAction(store)(props)["on_handle"]()

        assert store.docs == {}
        props.on_complete.assert_called_once_with()


def test_default_actions_order(store):
    assert [a.action for a in default_document_actions(store)] == ["publish", "delete"]


class TestPublishCommand:

    def test_publish_featured_draft_updates_home(self, home_store):
        home_store.add(make_content("drafts.workshop-raku", "workshop", featured=True))

        result = cli.publish(home_store, "workshop-raku")

        assert result == {"document_id": "workshop-raku", "sync_status": SYNCED, "completed": True}
        assert home_store.docs["workshop-raku"]["featuredInHome"] is True
        assert home_store.section_refs("courses2") == ["workshop-raku"]

    def test_publish_reports_sync_failure(self, home_store):
        home_store.add(make_content("drafts.class-torno", "class", featured=True))
        home_store.fail_on_write.add("page-home")

        result = cli.publish(home_store, "class-torno")

        assert result["sync_status"] == FAILED
        assert result["completed"] is True
        assert home_store.docs["class-torno"]["featuredInHome"] is True

    def test_unknown_document_raises(self, store):
        with pytest.raises(ValueError, match="Document not found"):
            cli.publish(store, "ghost")


class TestResyncCommands:

    def test_resync_home_applies_flags(self, home_store):
        home_store.add(make_home(courses=[], courses2=["workshop-raku"]))
        changes = cli.resync_home(home_store)
        assert changes == [("workshop-raku", True)]
        assert home_store.docs["workshop-raku"]["featuredInHome"] is True

    def test_resync_home_dry_run_writes_nothing(self, home_store):
        home_store.add(make_home(courses=[], courses2=["workshop-raku"]))
        changes = cli.resync_home(home_store, dry_run=True)
        assert changes == [("workshop-raku", True)]
        assert home_store.commits == []

    def test_resync_home_without_home(self, store):
        assert cli.resync_home(store) == []

    def test_resync_content_applies_sections(self, home_store):
        home_store.add(make_content("class-torno", "class", featured=True))
        cli.resync_content(home_store, "drafts.class-torno")
        assert home_store.section_refs("courses") == ["class-torno"]

    def test_resync_content_dry_run_writes_nothing(self, home_store):
        home_store.add(make_content("class-torno", "class", featured=True))
        sections = cli.resync_content(home_store, "class-torno", dry_run=True)
        assert home_store.commits == []
        courses = next(s for s in sections if s["type"] == "courses")
        assert [r["_ref"] for r in courses["courses"]] == ["class-torno"]

    def test_resync_content_missing_document(self, home_store):
        with pytest.raises(ValueError):
            cli.resync_content(home_store, "ghost")


class TestMain:

    def test_publish_subcommand(self):
        store = FakeStore([make_home(courses=[], courses2=[]), make_content("drafts.c1", "class", featured=True)])
        with mock.patch.object(cli, "get_store_client", return_value=store), \
                mock.patch("sanity_ops.config.load_env", return_value=None):
            with pytest.raises(SystemExit) as exc:
                cli.main(["publish", "c1"])
        assert exc.value.code == 0
        assert store.section_refs("courses") == ["c1"]

    def test_error_exits_non_zero(self, store):
        with mock.patch.object(cli, "get_store_client", return_value=store), \
                mock.patch("sanity_ops.config.load_env", return_value=None):
            with pytest.raises(SystemExit) as exc:
                cli.main(["resync-content", "ghost"])
        assert exc.value.code == 1
