import unittest

from _fakes import ManualPlatform

from src.gui_kit.autocomplete import AutocompleteModel
from src.gui_kit.autocomplete import AutocompleteOption
from src.gui_kit.autocomplete import AutocompleteState
from src.gui_kit.autocomplete import filter_options
from src.gui_kit.autocomplete import initials

ALICE = AutocompleteOption(id="1", label="Alice")
BOB = AutocompleteOption(id="2", label="Bob")
CAROL = AutocompleteOption(id="3", label="Carol Danvers", subtitle="Engineering")


class _Harness:
    def __init__(self, *, server_search: bool, debounce_ms: int = 500, **kwargs) -> None:
        self.platform = ManualPlatform()
        self.selected: list[AutocompleteOption | None] = []
        self.searches: list[str] = []
        self.model = AutocompleteModel(
            self.platform,
            on_select=self.selected.append,
            on_search=self.searches.append if server_search else None,
            debounce_ms=debounce_ms,
            **kwargs,
        )
        self.model.mount()

    def type(self, *texts: str, gap_ms: int = 50) -> None:
        for text in texts:
            self.model.input_changed(text)
            self.platform.advance(gap_ms)


class TestFilterOptions(unittest.TestCase):
    def test_local_filter_matches_label_subtitle_and_id_in_order(self):
        options = (ALICE, BOB, CAROL)
        self.assertEqual(filter_options(options, "bo"), (BOB,))
        self.assertEqual(filter_options(options, "ENGIN"), (CAROL,))
        self.assertEqual(filter_options(options, "3"), (CAROL,))
        self.assertEqual(filter_options(options, "a"), (ALICE, CAROL))
        self.assertEqual(filter_options(options, ""), options)

    def test_initials_use_first_two_words(self):
        self.assertEqual(initials("carol danvers smith"), "CD")
        self.assertEqual(initials("Bob"), "B")
        self.assertEqual(initials(""), "")
        self.assertEqual(CAROL.initials, "CD")


class TestAutocompleteSearch(unittest.TestCase):
    def test_rapid_typing_triggers_one_search_with_last_term(self):
        h = _Harness(server_search=True)
        h.type("a", "ab", "abc")
        self.assertEqual(h.searches, [])
        self.assertEqual(h.model.text, "abc", "typed text is shown without latency")
        h.platform.advance(500)
        self.assertEqual(h.searches, ["abc"])

    def test_selecting_then_reopening_does_not_search_for_label(self):
        h = _Harness(server_search=True)
        h.type("bo")
        h.platform.advance(500)
        self.assertEqual(h.searches, ["bo"])
        h.model.set_options([BOB])

        h.model.select(BOB)
        h.model.focus()
        h.platform.advance(2000)
        self.assertEqual(h.searches, ["bo"])
        self.assertEqual(h.model.text, "Bob")
        self.assertEqual(h.model.state, AutocompleteState.OPEN_RESULTS)

    def test_typing_the_committed_label_does_not_search(self):
        h = _Harness(server_search=True, options=[BOB])
        h.model.select(BOB)
        h.type("Bo", "Bob")
        h.platform.advance(500)
        self.assertEqual(h.searches, [])

    def test_commit_cancels_pending_search(self):
        h = _Harness(server_search=True, options=[ALICE])
        h.type("al")
        h.model.select(ALICE)
        h.platform.advance(1000)
        self.assertEqual(h.searches, [])

    def test_empty_term_never_searches(self):
        h = _Harness(server_search=True)
        h.type("a", "")
        h.platform.advance(1000)
        self.assertEqual(h.searches, [])

    def test_unmount_with_pending_timer_fires_nothing(self):
        h = _Harness(server_search=True)
        h.type("abc")
        self.assertTrue(h.model.search_pending)
        h.model.unmount()
        h.platform.advance(5000)
        self.assertEqual(h.searches, [])
        self.assertEqual(h.platform.pending_timers, 0)
        self.assertEqual(h.platform.outside_listeners, [])

    def test_repeated_mount_cycles_do_not_leak_listeners(self):
        h = _Harness(server_search=True)
        for _ in range(3):
            h.model.unmount()
            h.model.mount()
        self.assertEqual(len(h.platform.outside_listeners), 1)
        h.type("zed")
        h.platform.advance(500)
        self.assertEqual(h.searches, ["zed"])


class TestAutocompleteLocalFilter(unittest.TestCase):
    def test_typing_filters_locally_without_server_search(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.input_changed("bo")
        self.assertEqual(h.model.display_options, (BOB,))
        self.assertEqual(h.model.state, AutocompleteState.OPEN_RESULTS)

    def test_server_search_trusts_caller_options(self):
        h = _Harness(server_search=True, options=[ALICE, BOB])
        h.model.input_changed("bo")
        self.assertEqual(h.model.display_options, (ALICE, BOB))

    def test_no_match_reports_no_results(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.input_changed("zzz")
        self.assertEqual(h.model.state, AutocompleteState.OPEN_NO_RESULTS)


class TestAutocompleteStates(unittest.TestCase):
    def test_focus_opens_empty_and_loading_states(self):
        h = _Harness(server_search=True)
        self.assertEqual(h.model.state, AutocompleteState.CLOSED)
        h.model.focus()
        self.assertEqual(h.model.state, AutocompleteState.OPEN_EMPTY)
        h.model.input_changed("ac")
        h.model.set_loading(True)
        self.assertEqual(h.model.state, AutocompleteState.OPEN_LOADING)
        h.model.set_loading(False)
        self.assertEqual(h.model.state, AutocompleteState.OPEN_NO_RESULTS)
        h.model.set_options([ALICE])
        self.assertEqual(h.model.state, AutocompleteState.OPEN_RESULTS)

    def test_loading_with_prior_options_keeps_showing_them(self):
        h = _Harness(server_search=True, options=[ALICE])
        h.model.focus()
        h.model.set_loading(True)
        self.assertEqual(h.model.state, AutocompleteState.OPEN_RESULTS)

    def test_error_is_passed_through_without_changing_state(self):
        h = _Harness(server_search=True, options=[ALICE])
        h.model.focus()
        h.model.set_error("Search failed")
        self.assertEqual(h.model.error, "Search failed")
        self.assertEqual(h.model.state, AutocompleteState.OPEN_RESULTS)
        h.model.set_error("")
        self.assertIsNone(h.model.error)

    def test_outside_click_closes_and_reverts_uncommitted_text(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.select(ALICE)
        h.model.input_changed("Alx")
        h.platform.click_outside()
        self.assertEqual(h.model.state, AutocompleteState.CLOSED)
        self.assertEqual(h.model.text, "Alice")
        self.assertEqual(h.model.selected_id, "1")

    def test_outside_click_without_selection_clears_text(self):
        h = _Harness(server_search=False, options=[ALICE])
        h.model.input_changed("zz")
        h.platform.click_outside()
        self.assertEqual(h.model.text, "")
        self.assertFalse(h.model.is_open)

    def test_disabled_ignores_input_and_stays_closed(self):
        h = _Harness(server_search=True, options=[ALICE], disabled=True)
        h.model.focus()
        h.model.input_changed("al")
        self.assertFalse(h.model.key_pressed("ArrowDown"))
        self.assertEqual(h.model.state, AutocompleteState.CLOSED)
        self.assertEqual(h.model.text, "")
        h.platform.advance(1000)
        self.assertEqual(h.searches, [])

    def test_subscribers_are_notified_and_can_unsubscribe(self):
        h = _Harness(server_search=False, options=[ALICE])
        calls: list[int] = []
        remove = h.model.subscribe(lambda: calls.append(1))
        h.model.focus()
        remove()
        h.model.input_changed("a")
        self.assertEqual(len(calls), 1)


class TestAutocompleteKeyboard(unittest.TestCase):
    def test_arrow_down_clamps_at_last_result(self):
        h = _Harness(server_search=False, options=[ALICE, BOB, CAROL])
        h.model.focus()
        for _ in range(5):
            self.assertTrue(h.model.key_pressed("ArrowDown"))
        self.assertEqual(h.model.focused_index, 2)
        self.assertEqual(h.model.focused_option, CAROL)

    def test_arrow_up_clamps_at_no_focus(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.focus()
        h.model.key_pressed("ArrowDown")
        h.model.key_pressed("ArrowUp")
        self.assertEqual(h.model.focused_index, -1)
        h.model.key_pressed("ArrowUp")
        self.assertEqual(h.model.focused_index, -1)

    def test_tk_keysyms_are_accepted(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.focus()
        h.model.key_pressed("Down")
        h.model.key_pressed("Down")
        h.model.key_pressed("Return")
        self.assertEqual(h.selected, [BOB])

    def test_enter_commits_focused_item_exactly_once(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.focus()
        h.model.key_pressed("ArrowDown")
        h.model.key_pressed("Enter")
        self.assertEqual(h.selected, [ALICE])
        self.assertEqual(h.model.text, "Alice")
        self.assertEqual(h.model.state, AutocompleteState.CLOSED)
        self.assertFalse(h.model.input_focused)

    def test_enter_without_focus_is_noop(self):
        h = _Harness(server_search=False, options=[ALICE])
        h.model.focus()
        h.model.key_pressed("Enter")
        self.assertEqual(h.selected, [])
        self.assertTrue(h.model.is_open)

    def test_escape_closes_without_touching_selection(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.select(BOB)
        h.model.focus()
        h.model.key_pressed("Escape")
        self.assertEqual(h.model.state, AutocompleteState.CLOSED)
        self.assertFalse(h.model.input_focused)
        self.assertEqual(h.model.selected_id, "2")
        self.assertEqual(h.selected, [BOB])

    def test_typing_resets_keyboard_focus(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.focus()
        h.model.key_pressed("ArrowDown")
        h.model.input_changed("b")
        self.assertEqual(h.model.focused_index, -1)

    def test_unknown_keys_are_not_handled(self):
        h = _Harness(server_search=False, options=[ALICE])
        self.assertFalse(h.model.key_pressed("Tab"))


class TestAutocompleteSelection(unittest.TestCase):
    def test_select_then_empty_field_clears_exactly_once(self):
        h = _Harness(server_search=False, options=[ALICE, BOB])
        h.model.select(ALICE)
        h.model.input_changed("Alic")
        h.model.input_changed("")
        h.platform.advance(1000)
        self.assertEqual(h.selected, [ALICE, None])
        self.assertIsNone(h.model.selected_id)

    def test_clear_control_notifies_once_and_reopens_empty(self):
        h = _Harness(server_search=True, options=[ALICE])
        h.model.select(ALICE)
        h.model.clear()
        self.assertEqual(h.selected, [ALICE, None])
        self.assertEqual(h.model.text, "")
        self.assertTrue(h.model.is_open)
        self.assertTrue(h.model.input_focused)

    def test_show_clear_only_with_selection(self):
        h = _Harness(server_search=False, options=[ALICE])
        self.assertFalse(h.model.show_clear)
        h.model.select(ALICE)
        self.assertTrue(h.model.show_clear)

    def test_external_value_change_adopts_label_without_search(self):
        h = _Harness(server_search=True, options=[ALICE, BOB])
        self.assertTrue(h.model.set_value("2"))
        self.assertEqual(h.model.text, "Bob")
        h.platform.advance(1000)
        self.assertEqual(h.searches, [])
        self.assertEqual(h.selected, [], "programmatic sync does not echo back to the caller")

    def test_initial_value_shows_its_label(self):
        h = _Harness(server_search=False, options=[ALICE, BOB], value="1")
        self.assertEqual(h.model.text, "Alice")
        self.assertEqual(h.model.selected_option, ALICE)

    def test_unknown_selection_degrades_to_nothing_displayed(self):
        h = _Harness(server_search=False, options=[ALICE])
        self.assertTrue(h.model.set_value("missing"))
        self.assertEqual(h.model.text, "")
        self.assertIsNone(h.model.selected_option)
        self.assertFalse(h.model.show_clear)

    def test_label_is_adopted_when_options_arrive_after_value(self):
        h = _Harness(server_search=True)
        h.model.set_value("2")
        self.assertEqual(h.model.text, "")
        h.model.set_options([ALICE, BOB])
        self.assertEqual(h.model.text, "Bob")
        h.platform.advance(1000)
        self.assertEqual(h.searches, [])

    def test_late_options_do_not_overwrite_typing(self):
        h = _Harness(server_search=True)
        h.model.set_value("2")
        h.model.input_changed("Ca")
        h.model.set_options([BOB, CAROL])
        self.assertEqual(h.model.text, "Ca")

    def test_stale_sync_is_ignored_after_user_typed(self):
        h = _Harness(server_search=True, options=[ALICE, BOB])
        revision = h.model.revision
        h.model.input_changed("Car")
        self.assertFalse(h.model.set_value("2", revision=revision))
        self.assertEqual(h.model.text, "Car")
        self.assertIsNone(h.model.selected_id)

    def test_current_revision_sync_is_applied(self):
        h = _Harness(server_search=True, options=[ALICE, BOB])
        h.model.input_changed("B")
        revision = h.model.revision
        self.assertTrue(h.model.set_value("2", revision=revision))
        self.assertEqual(h.model.text, "Bob")
        h.platform.advance(1000)
        self.assertEqual(h.searches, [], "pending keystroke search is superseded by the sync")

    def test_reset_to_none_clears_text(self):
        h = _Harness(server_search=False, options=[ALICE], value="1")
        h.model.set_value(None)
        self.assertEqual(h.model.text, "")
        self.assertIsNone(h.model.selected_id)


if __name__ == "__main__":
    unittest.main()
