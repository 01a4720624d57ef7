"""Tests for the reminder batch dispatcher."""

import subprocess
import sys
import textwrap
import threading
import time
import unittest
from unittest.mock import MagicMock

from src.paths import PROJECT_ROOT
from src.reminders.dispatcher import (
    BatchDispatcher,
    CallTimeoutError,
    _call_with_timeout,
    dispatch,
    group_by_owner,
)
from src.reminders.models import FailureReason, RenderedMessage

from testing.reminders.fixtures import (
    FakeNotifier,
    FakeProfileLookup,
    make_candidate,
    make_settings,
    profile,
)


class TestGroupByOwner(unittest.TestCase):
    """Tests for group_by_owner function."""

    def test_groups_in_first_seen_order(self) -> None:
        """Test that owners keep first-seen order and tasks keep input order."""
        due = [
            make_candidate(1, owner_id="u1"),
            make_candidate(2, owner_id="u2"),
            make_candidate(3, owner_id="u1"),
        ]

        batches = group_by_owner(due)

        self.assertEqual([b.owner_id for b in batches], ["u1", "u2"])
        self.assertEqual(batches[0].task_ids, (1, 3))
        self.assertEqual(batches[1].task_ids, (2,))

    def test_empty(self) -> None:
        """Test that no tasks gives no batches."""
        self.assertEqual(group_by_owner([]), [])


class TestBatchDispatcher(unittest.TestCase):
    """Tests for BatchDispatcher class."""

    def setUp(self) -> None:
        """Set up a dispatcher with two known users."""
        self.lookup = FakeProfileLookup(
            {"u1": profile("u1", name="Ada"), "u2": profile("u2", name="Grace")}
        )
        self.notifier = FakeNotifier()
        self.dispatcher = BatchDispatcher(self.lookup, self.notifier, settings=make_settings())

    def test_empty_input_makes_no_calls(self) -> None:
        """Test that dispatching nothing makes no lookups or sends."""
        result = self.dispatcher.dispatch([])

        self.assertEqual(result.sent_count, 0)
        self.assertEqual(result.notified_task_ids, set())
        self.assertEqual(result.failed_users, {})
        self.assertEqual(self.lookup.calls, [])
        self.assertEqual(self.notifier.sent, [])

    def test_one_message_per_user(self) -> None:
        """Test that a user with several due tasks gets exactly one message."""
        due = [
            make_candidate(1, owner_id="u1", title="Pay rent"),
            make_candidate(2, owner_id="u1", title="Call dentist"),
        ]

        result = self.dispatcher.dispatch(due)

        self.assertEqual(len(self.notifier.sent), 1)
        address, subject, body = self.notifier.sent[0]
        self.assertEqual(address, "u1@example.com")
        self.assertIn("2 pending tasks", subject)
        self.assertIn("Pay rent", body)
        self.assertIn("Call dentist", body)
        self.assertEqual(result.notified_task_ids, {1, 2})
        self.assertEqual(result.sent_count, 1)

    def test_mixed_success_and_failure(self) -> None:
        """Test that one user's failed send does not affect another user."""
        self.notifier.failing_addresses.add("u2@example.com")
        due = [
            make_candidate("t1", owner_id="u1"),
            make_candidate("t2", owner_id="u1"),
            make_candidate("t3", owner_id="u2"),
        ]

        result = self.dispatcher.dispatch(due)

        self.assertEqual(sorted(self.notifier.addresses), ["u1@example.com", "u2@example.com"])
        self.assertEqual(result.notified_task_ids, {"t1", "t2"})
        self.assertEqual(result.failed_users, {"u2": FailureReason.DELIVERY_FAILED})
        self.assertEqual(result.sent_count, 1)

    def test_unresolved_profile(self) -> None:
        """Test that a user with no profile is failed without a send."""
        due = [make_candidate(1, owner_id="u1"), make_candidate(2, owner_id="ghost")]

        result = self.dispatcher.dispatch(due)

        self.assertEqual(self.notifier.addresses, ["u1@example.com"])
        self.assertEqual(result.failed_users, {"ghost": FailureReason.PROFILE_UNRESOLVED})
        self.assertEqual(result.notified_task_ids, {1})

    def test_profile_without_address(self) -> None:
        """Test that a profile with an empty address counts as unresolved."""
        self.lookup.profiles["u1"] = profile("u1", address="")

        result = self.dispatcher.dispatch([make_candidate(1, owner_id="u1")])

        self.assertEqual(self.notifier.sent, [])
        self.assertEqual(result.failed_users, {"u1": FailureReason.PROFILE_UNRESOLVED})

    def test_lookup_exception(self) -> None:
        """Test that a lookup error is recorded against that user only."""
        def resolve(user_id: str) -> object:
            if user_id == "u2":
                raise RuntimeError("db unavailable")
            return profile(user_id)

        lookup = MagicMock()
        lookup.resolve.side_effect = resolve
        dispatcher = BatchDispatcher(lookup, self.notifier, settings=make_settings())

        result = dispatcher.dispatch(
            [make_candidate(1, owner_id="u1"), make_candidate(2, owner_id="u2")]
        )

        self.assertEqual(result.notified_task_ids, {1})
        self.assertEqual(result.failed_users, {"u2": FailureReason.PROFILE_UNRESOLVED})

    def test_send_exception(self) -> None:
        """Test that a notifier exception is recorded as a delivery failure."""
        notifier = MagicMock()
        notifier.send.side_effect = ConnectionError("smtp down")
        dispatcher = BatchDispatcher(self.lookup, notifier, settings=make_settings())

        result = dispatcher.dispatch([make_candidate(1, owner_id="u1")])

        self.assertEqual(result.notified_task_ids, set())
        self.assertEqual(result.failed_users, {"u1": FailureReason.DELIVERY_FAILED})

    def test_render_error_is_delivery_failure(self) -> None:
        """Test that an unexpected error while rendering fails only that user."""
        render = MagicMock(side_effect=ValueError("bad template"))
        dispatcher = BatchDispatcher(
            self.lookup, self.notifier, settings=make_settings(), render=render
        )

        result = dispatcher.dispatch([make_candidate(1, owner_id="u1")])

        self.assertEqual(self.notifier.sent, [])
        self.assertEqual(result.failed_users, {"u1": FailureReason.DELIVERY_FAILED})

    def test_custom_renderer(self) -> None:
        """Test that the renderer receives the profile and the user's tasks."""
        render = MagicMock(return_value=RenderedMessage(subject="S", body="B"))
        dispatcher = BatchDispatcher(
            self.lookup, self.notifier, settings=make_settings(), render=render
        )
        tasks = [make_candidate(1, owner_id="u1"), make_candidate(2, owner_id="u1")]

        dispatcher.dispatch(tasks)

        rendered_profile, rendered_tasks = render.call_args.args
        self.assertEqual(rendered_profile.user_id, "u1")
        self.assertEqual(list(rendered_tasks), tasks)
        self.assertEqual(self.notifier.sent, [("u1@example.com", "S", "B")])

    def test_send_timeout(self) -> None:
        """Test that a hung send is abandoned and recorded as a delivery failure."""
        release = threading.Event()

        class SlowNotifier:
            def send(self, address: str, subject: str, body: str) -> bool:
                release.wait(5)
                return True

        dispatcher = BatchDispatcher(
            self.lookup, SlowNotifier(), settings=make_settings(send_timeout_seconds=0.05)
        )
        try:
            result = dispatcher.dispatch([make_candidate(1, owner_id="u1")])
        finally:
            release.set()

        self.assertEqual(result.failed_users, {"u1": FailureReason.DELIVERY_FAILED})
        self.assertEqual(result.notified_task_ids, set())

    def test_lookup_timeout(self) -> None:
        """Test that a hung lookup is recorded as an unresolved profile."""
        release = threading.Event()

        class SlowLookup:
            def resolve(self, user_id: object) -> None:
                release.wait(5)

        dispatcher = BatchDispatcher(
            SlowLookup(), self.notifier, settings=make_settings(lookup_timeout_seconds=0.05)
        )
        try:
            result = dispatcher.dispatch([make_candidate(1, owner_id="u1")])
        finally:
            release.set()

        self.assertEqual(result.failed_users, {"u1": FailureReason.PROFILE_UNRESOLVED})
        self.assertEqual(self.notifier.sent, [])

    def test_hung_lookups_do_not_starve_other_users(self) -> None:
        """Test that a healthy lookup still runs while earlier lookups hang."""
        release = threading.Event()
        self.addCleanup(release.set)

        class PartlyHungLookup:
            def resolve(self, user_id: str) -> object:
                if user_id != "healthy":
                    release.wait(5)
                return profile(user_id)

        owners = ["hung-1", "hung-2", "hung-3", "hung-4", "healthy"]
        dispatcher = BatchDispatcher(
            PartlyHungLookup(),
            self.notifier,
            settings=make_settings(max_workers=2, lookup_timeout_seconds=0.2),
        )

        result = dispatcher.dispatch(
            [make_candidate(i, owner_id=owner) for i, owner in enumerate(owners)]
        )

        self.assertEqual(self.notifier.addresses, ["healthy@example.com"])
        self.assertEqual(result.notified_task_ids, {4})
        self.assertEqual(
            result.failed_users,
            {f"hung-{n}": FailureReason.PROFILE_UNRESOLVED for n in range(1, 5)},
        )

    def test_cancelled_before_start(self) -> None:
        """Test that a set cancel event stops every user from being started."""
        cancel = threading.Event()
        cancel.set()

        result = self.dispatcher.dispatch(
            [make_candidate(1, owner_id="u1"), make_candidate(2, owner_id="u2")],
            cancel_event=cancel,
        )

        self.assertEqual(self.lookup.calls, [])
        self.assertEqual(self.notifier.sent, [])
        self.assertEqual(result.cancelled_user_ids, {"u1", "u2"})
        self.assertEqual(result.failed_users, {})
        self.assertEqual(result.notified_task_ids, set())

    def test_cancel_mid_run_keeps_completed_sends(self) -> None:
        """Test that users already sent stay notified when the run is cancelled."""
        cancel = threading.Event()

        class CancellingNotifier(FakeNotifier):
            def send(self, address: str, subject: str, body: str) -> bool:
                delivered = super().send(address, subject, body)
                cancel.set()
                return delivered

        notifier = CancellingNotifier()
        dispatcher = BatchDispatcher(
            self.lookup, notifier, settings=make_settings(max_workers=1)
        )

        result = dispatcher.dispatch(
            [make_candidate(1, owner_id="u1"), make_candidate(2, owner_id="u2")],
            cancel_event=cancel,
        )

        self.assertEqual(notifier.addresses, ["u1@example.com"])
        self.assertEqual(result.notified_task_ids, {1})
        self.assertEqual(result.cancelled_user_ids, {"u2"})

    def test_users_processed_concurrently(self) -> None:
        """Test that sends for different users overlap when workers allow."""
        barrier = threading.Barrier(3, timeout=2)

        class BarrierNotifier(FakeNotifier):
            def send(self, address: str, subject: str, body: str) -> bool:
                barrier.wait()
                return super().send(address, subject, body)

        lookup = FakeProfileLookup({u: profile(u) for u in ("u1", "u2", "u3")})
        notifier = BarrierNotifier()
        dispatcher = BatchDispatcher(lookup, notifier, settings=make_settings(max_workers=3))

        result = dispatcher.dispatch([make_candidate(i, owner_id=f"u{i}") for i in (1, 2, 3)])

        self.assertEqual(result.sent_count, 3)
        self.assertEqual(result.notified_task_ids, {1, 2, 3})

    def test_many_users_each_notified_once(self) -> None:
        """Test that every user is sent exactly one message under concurrency."""
        users = [f"user-{i}" for i in range(20)]
        lookup = FakeProfileLookup({u: profile(u) for u in users})
        notifier = FakeNotifier()
        dispatcher = BatchDispatcher(lookup, notifier, settings=make_settings(max_workers=4))
        due = [make_candidate(f"{u}-{n}", owner_id=u) for n in range(3) for u in users]

        result = dispatcher.dispatch(due)

        self.assertEqual(sorted(notifier.addresses), sorted(f"{u}@example.com" for u in users))
        self.assertEqual(result.sent_count, 20)
        self.assertEqual(len(result.notified_task_ids), 60)


class TestDispatchFunction(unittest.TestCase):
    """Tests for the module-level dispatch function."""

    def test_three_tasks_two_users(self) -> None:
        """Test two sends, three notified tasks, no failures."""
        lookup = FakeProfileLookup({"U1": profile("U1"), "U2": profile("U2")})
        notifier = FakeNotifier()
        due = [
            make_candidate("A", owner_id="U1"),
            make_candidate("B", owner_id="U1"),
            make_candidate("C", owner_id="U2"),
        ]

        result = dispatch(due, lookup, notifier, settings=make_settings())

        self.assertEqual(len(notifier.sent), 2)
        self.assertEqual(result.notified_task_ids, {"A", "B", "C"})
        self.assertEqual(result.failed_users, {})
        self.assertEqual(result.sent_count, 2)


class TestCallWithTimeout(unittest.TestCase):
    """Tests for _call_with_timeout function."""

    def test_returns_value(self) -> None:
        """Test that a fast call returns its value."""
        self.assertEqual(_call_with_timeout("add", 1.0, lambda a, b: a + b, 1, 2), 3)

    def test_propagates_call_errors(self) -> None:
        """Test that an exception raised by the call reaches the caller."""
        with self.assertRaises(ZeroDivisionError):
            _call_with_timeout("divide", 1.0, lambda: 1 / 0)

    def test_raises_on_timeout(self) -> None:
        """Test that a slow call raises CallTimeoutError."""
        with self.assertRaises(CallTimeoutError) as ctx:
            _call_with_timeout("sleep", 0.01, time.sleep, 0.2)

        self.assertEqual(ctx.exception.operation, "sleep")
        self.assertIn("timed out", str(ctx.exception))

    def test_runs_on_daemon_thread(self) -> None:
        """Test that calls run on daemon threads that cannot block exit."""
        thread = _call_with_timeout("current thread", 1.0, threading.current_thread)

        self.assertTrue(thread.daemon)
        self.assertIsNot(thread, threading.current_thread())


class TestHungCollaboratorExit(unittest.TestCase):
    """Tests that a hung collaborator does not keep the process alive."""

    def test_process_exits_promptly_after_send_timeout(self) -> None:
        """Test that the interpreter exits soon after a send times out."""
        script = textwrap.dedent(
            """
            import time

            from src.reminders.dispatcher import dispatch
            from src.reminders.models import FailureReason
            from testing.reminders.fixtures import (
                FakeProfileLookup,
                make_candidate,
                make_settings,
                profile,
            )


            class HungNotifier:
                def send(self, address, subject, body):
                    time.sleep(30)
                    return True


            result = dispatch(
                [make_candidate(1, owner_id="u1")],
                FakeProfileLookup({"u1": profile("u1")}),
                HungNotifier(),
                settings=make_settings(send_timeout_seconds=0.3),
            )
            assert result.failed_users == {"u1": FailureReason.DELIVERY_FAILED}
            """
        )

        started = time.monotonic()
        completed = subprocess.run(
            [sys.executable, "-c", script],
            cwd=PROJECT_ROOT,
            capture_output=True,
            text=True,
            timeout=20,
        )
        elapsed = time.monotonic() - started

        self.assertEqual(completed.returncode, 0, completed.stderr)
        self.assertLess(elapsed, 15)


if __name__ == "__main__":
    unittest.main()
