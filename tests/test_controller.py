"""Tests for the selection controller."""

import pytest

from mode_manager.controller import SelectionController
from mode_manager.types import (
    CommitItem,
    InvalidEventError,
    Reorder,
    RequestCatalog,
    SelectMany,
    SelectOne,
)


MINIMAL_DOC = "# 1. General\n## 1.1 Core\n- 🧭 Navigator (navigator)\n- Scout (scout)\n"


@pytest.fixture
def controller(fake_source, sink):
    ctl = SelectionController(fake_source, sink=sink)
    ctl.request_catalog("en")
    return ctl


class TestCatalogLoading:
    def test_request_catalog(self, controller, fake_source):
        assert fake_source.requests == ["en"]
        assert controller.locale == "en"
        assert controller.loading is False
        assert controller.error is None
        assert controller.view.catalog.general_purpose.title == "General-purpose modes"

    def test_begin_marks_loading(self, fake_source):
        ctl = SelectionController(fake_source)
        ctl.begin_catalog_request("en")
        assert ctl.loading is True

    def test_last_request_wins(self, fake_source, sample_catalog, sample_catalog_ru):
        ctl = SelectionController(fake_source)
        first = ctl.begin_catalog_request("en")
        second = ctl.begin_catalog_request("ru")

        assert ctl.deliver_catalog(second, sample_catalog_ru) is True
        assert ctl.deliver_catalog(first, sample_catalog) is False

        assert ctl.locale == "ru"
        assert ctl.view.catalog.general_purpose.title == "Режимы общего назначения"

    def test_stale_result_before_latest(self, fake_source, sample_catalog):
        ctl = SelectionController(fake_source)
        first = ctl.begin_catalog_request("en")
        ctl.begin_catalog_request("ru")

        assert ctl.deliver_catalog(first, sample_catalog) is False
        assert ctl.loading is True
        assert ctl.view.catalog.is_empty

    def test_stale_error_ignored(self, fake_source, sample_catalog_ru):
        ctl = SelectionController(fake_source)
        first = ctl.begin_catalog_request("en")
        second = ctl.begin_catalog_request("ru")
        ctl.deliver_catalog(second, sample_catalog_ru)

        assert ctl.deliver_error(first, "late failure") is False
        assert ctl.error is None

    def test_error_leaves_selection_untouched(self, make_source, sink, sample_catalog):
        source = make_source({"en": sample_catalog}, failures={"ru": "Failed to load stacks list."})
        ctl = SelectionController(source, sink=sink, initial_slugs=["navigator"])
        ctl.request_catalog("en")
        catalog_before = ctl.view.catalog

        assert ctl.change_language("ru") is False
        assert ctl.error == "Failed to load stacks list."
        assert ctl.loading is False
        assert ctl.locale == "en"
        assert ctl.ordered_slugs == ("navigator",)
        assert ctl.view.catalog == catalog_before

    def test_error_default_message(self, fake_source):
        ctl = SelectionController(fake_source)
        generation = ctl.begin_catalog_request("en")
        ctl.deliver_error(generation, "")
        assert ctl.error == "Unknown error loading stacks."

    def test_success_clears_error(self, make_source, sample_catalog):
        source = make_source({"en": sample_catalog}, failures={"ru": "boom"})
        ctl = SelectionController(source)
        ctl.request_catalog("ru")
        assert ctl.error == "boom"
        ctl.request_catalog("en")
        assert ctl.error is None

    def test_change_language_same_locale_noop(self, controller, fake_source):
        assert controller.change_language("en") is False
        assert fake_source.requests == ["en"]

    def test_selection_survives_language_switch(self, controller):
        controller.dispatch(SelectOne("navigator", True))
        controller.dispatch(SelectOne("react-specialist", True))

        assert controller.change_language("ru") is True
        assert controller.locale == "ru"
        assert controller.ordered_slugs == ("navigator", "react-specialist")
        assert [e.name for e in controller.view.ordered_entries] == [
            "Навигатор",
            "React специалист",
        ]

    def test_slugs_missing_from_locale_retained(self, controller):
        controller.dispatch(SelectOne("django-developer", True))
        controller.change_language("ru")
        assert controller.ordered_slugs == ("django-developer",)
        assert controller.view.ordered_entries == ()

        controller.change_language("en")
        assert [e.slug for e in controller.view.ordered_entries] == ["django-developer"]


class TestEvents:
    def test_select_batch_then_reorder(self, make_source):
        ctl = SelectionController(make_source({"en": MINIMAL_DOC}))
        ctl.request_catalog("en")

        ctl.dispatch(SelectOne("navigator", True))
        ctl.dispatch(SelectMany(("scout",), True))
        assert ctl.ordered_slugs == ("navigator", "scout")
        assert ctl.view.catalog.general_purpose.subgroups[0].selected

        navigator_id, scout_id = ctl.view.ordered_ids
        ctl.dispatch(Reorder(scout_id, navigator_id))
        assert ctl.ordered_slugs == ("scout", "navigator")

    def test_select_many_deselect(self, controller):
        controller.dispatch(SelectMany(("navigator", "scout"), True))
        controller.dispatch(SelectMany(("navigator",), False))
        assert controller.ordered_slugs == ("scout",)

    def test_request_catalog_event(self, controller, fake_source):
        controller.dispatch(RequestCatalog("ru"))
        assert fake_source.requests == ["en", "ru"]
        assert controller.locale == "ru"

    def test_unknown_event_type(self, controller):
        with pytest.raises(TypeError):
            controller.dispatch(object())

    def test_dispatch_message(self, controller):
        controller.dispatch_message({"command": "selectOne", "slug": "scout", "selected": True})
        controller.dispatch_message(
            {"command": "selectMany", "slugs": ["navigator", "builder"], "selected": True}
        )
        assert controller.ordered_slugs == ("scout", "navigator", "builder")

    def test_invalid_message_rejected(self, controller):
        controller.dispatch(SelectOne("navigator", True))
        with pytest.raises(InvalidEventError):
            controller.dispatch_message({"command": "selectOne", "slug": "scout"})
        with pytest.raises(InvalidEventError):
            controller.dispatch_message({"command": "explode"})
        assert controller.ordered_slugs == ("navigator",)

    def test_select_entry_by_id(self, controller):
        assert controller.select_entry("mode-framework-0-subgroup-1-0", True) is True
        assert controller.ordered_slugs == ("django-developer",)

    def test_select_entry_unknown(self, controller):
        assert controller.select_entry("mode-nope", True) is False
        assert controller.ordered_slugs == ()

    def test_select_subgroup(self, controller):
        assert controller.select_subgroup("general-purpose", "subgroup-0", True) is True
        assert controller.ordered_slugs == ("navigator", "scout", "builder")
        assert controller.view.catalog.general_purpose.subgroups[0].selected

        assert controller.select_subgroup("general-purpose", "subgroup-0", False) is True
        assert controller.ordered_slugs == ()

    def test_select_subgroup_is_one_recompute(self, controller):
        before = controller.store.recompute_count
        controller.select_subgroup("framework-0", "subgroup-0", True)
        assert controller.store.recompute_count == before + 1

    def test_select_subgroup_unknown(self, controller):
        assert controller.select_subgroup("framework-9", "subgroup-0", True) is False

    def test_subscribe(self, controller):
        seen = []
        controller.subscribe(seen.append)
        controller.dispatch(SelectOne("scout", True))
        assert len(seen) == 1
        assert [e.slug for e in seen[0].ordered_entries] == ["scout"]


class TestReorder:
    def test_reorder_visible(self, controller):
        controller.dispatch(SelectMany(("navigator", "scout", "builder"), True))
        ids = controller.view.ordered_ids
        assert controller.reorder(ids[2], ids[0]) is True
        assert controller.ordered_slugs == ("builder", "navigator", "scout")

    def test_reorder_keeps_hidden_slugs_in_place(self, fake_source):
        ctl = SelectionController(fake_source, initial_slugs=["ghost", "navigator", "scout"])
        ctl.request_catalog("en")
        navigator_id, scout_id = ctl.view.ordered_ids

        assert ctl.reorder(scout_id, navigator_id) is True
        assert ctl.ordered_slugs == ("ghost", "scout", "navigator")

    def test_reorder_same_id(self, controller):
        controller.dispatch(SelectMany(("navigator", "scout"), True))
        navigator_id = controller.view.ordered_ids[0]
        assert controller.reorder(navigator_id, navigator_id) is False
        assert controller.ordered_slugs == ("navigator", "scout")

    def test_reorder_unknown_id(self, controller):
        controller.dispatch(SelectMany(("navigator", "scout"), True))
        assert controller.reorder("mode-gone", controller.view.ordered_ids[0]) is False
        assert controller.ordered_slugs == ("navigator", "scout")


class TestCommitCancel:
    def test_commit_payload(self, controller, sink):
        controller.dispatch(SelectMany(("scout", "navigator"), True))
        items = controller.commit()

        assert items == [CommitItem("scout", 0), CommitItem("navigator", 1)]
        assert sink.commits == [items]
        assert [item.to_dict() for item in items] == [
            {"slug": "scout", "order": 0},
            {"slug": "navigator", "order": 1},
        ]

    def test_commit_includes_hidden_slugs(self, fake_source, sink):
        ctl = SelectionController(fake_source, sink=sink, initial_slugs=["ghost"])
        ctl.request_catalog("en")
        ctl.dispatch(SelectOne("scout", True))
        assert [item.slug for item in ctl.commit()] == ["ghost", "scout"]

    def test_commit_without_sink(self, fake_source):
        ctl = SelectionController(fake_source, initial_slugs=["a"])
        assert ctl.commit() == [CommitItem("a", 0)]

    def test_has_changes(self, controller):
        assert controller.has_changes is False
        controller.dispatch(SelectOne("scout", True))
        assert controller.has_changes is True
        controller.commit()
        assert controller.has_changes is False
        assert controller.committed_slugs == ("scout",)

    def test_order_change_counts_as_change(self, fake_source):
        ctl = SelectionController(fake_source, initial_slugs=["navigator", "scout"])
        ctl.request_catalog("en")
        navigator_id, scout_id = ctl.view.ordered_ids
        ctl.reorder(scout_id, navigator_id)
        assert ctl.has_changes is True

    def test_cancel_restores_baseline(self, fake_source):
        ctl = SelectionController(fake_source, initial_slugs=["navigator"])
        ctl.request_catalog("en")
        ctl.dispatch(SelectOne("builder", True))
        ctl.dispatch(SelectOne("navigator", False))

        ctl.cancel()
        assert ctl.ordered_slugs == ("navigator",)
        assert ctl.has_changes is False
