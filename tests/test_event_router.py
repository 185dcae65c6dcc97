"""
Unit tests for the event router and alert session lifecycle
"""
import pytest

from controllers.alert_session import SessionKind, SessionState, TimerPurpose
from tags.base import EventState, TemperatureState
from tests.helpers import MINUTE, advance


@pytest.fixture
def router(make_router):
    return make_router()


@pytest.fixture
def tag(make_tag):
    return make_tag()


def open_tag(router, tag):
    tag.opened = router.on_open
    tag.apply_event('opened')


class TestMotionLifecycle:
    """Open / close / disarm handling"""

    def test_open_creates_single_session(self, router, tag):
        router.on_open(tag)
        first = router.get_session(SessionKind.MOTION, tag.uuid)
        router.on_open(tag)

        assert first is not None
        assert router.get_session(SessionKind.MOTION, tag.uuid) is first
        assert len(router.motion_sessions) == 1
        assert first.state == SessionState.AWAITING_INITIAL

    def test_open_on_disarmed_tag_is_ignored(self, router, make_tag):
        tag = make_tag(event_state=0)
        router.on_open(tag)
        assert router.motion_sessions == {}

    def test_close_removes_session(self, router, tag):
        router.on_open(tag)
        router.on_close(tag)
        assert tag.uuid not in router.motion_sessions

    def test_failed_start_leaves_no_session(self, make_router, tag, channel, scheduler, clock):
        from controllers.beeper_controller import BeeperPolicy

        router = make_router(policy=BeeperPolicy.ON_IMMEDIATELY)

        def refuse(session):
            raise RuntimeError("beeper unavailable")

        router.beeper.on_session_started = refuse
        router.on_open(tag)

        assert router.motion_sessions == {}
        assert scheduler.next_due() is None

        router.beeper.on_session_started = lambda session: None
        router.on_open(tag)
        assert tag.uuid in router.motion_sessions
        advance(clock, scheduler, 5 * MINUTE)
        assert channel.messages == ["Front door open for 5 minutes."]

    def test_close_without_session_is_noop(self, router, tag, channel, scheduler):
        router.on_close(tag)
        assert channel.sent == []
        assert scheduler.next_due() is None

    def test_close_twice_has_single_teardown(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 6 * MINUTE)
        router.on_close(tag)
        router.on_close(tag)
        closed = [m for m in channel.messages if 'closed' in m]
        assert closed == ["Front door closed after being open for 6 minutes."]

    def test_events_raised_by_tag_reach_router(self, router, tag):
        open_tag(router, tag)
        assert tag.uuid in router.motion_sessions


class TestNotificationTiming:
    """Initial delay and repeat schedule"""

    def test_nothing_before_initial_delay(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 5 * MINUTE - 1)
        assert channel.sent == []

    def test_scenario_open_repeat_and_close(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)

        advance(clock, scheduler, 5 * MINUTE)
        assert channel.messages == ["Front door open for 5 minutes."]

        advance(clock, scheduler, 10 * MINUTE)
        advance(clock, scheduler, 8 * MINUTE)
        assert channel.messages == [
            "Front door open for 5 minutes.",
            "Front door open for 15 minutes.",
        ]

        router.on_close(tag)
        assert channel.messages[-1] == "Front door closed after being open for 23 minutes."
        assert scheduler.next_due() is None

        advance(clock, scheduler, 10 * MINUTE)
        assert len(channel.messages) == 3

    def test_repeats_until_teardown(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 45 * MINUTE)
        assert channel.messages == [
            "Front door open for 5 minutes.",
            "Front door open for 15 minutes.",
            "Front door open for 25 minutes.",
            "Front door open for 35 minutes.",
            "Front door open for 45 minutes.",
        ]
        assert router.get_session(SessionKind.MOTION, tag.uuid).state == SessionState.REPEATING

    def test_zero_repeat_delay_fires_once(self, make_router, tag, channel, clock, scheduler):
        router = make_router(repeat=0)
        router.on_open(tag)
        advance(clock, scheduler, 60 * MINUTE)
        assert channel.messages == ["Front door open for 5 minutes."]
        assert router.get_session(SessionKind.MOTION, tag.uuid).state == SessionState.NOTIFIED

    def test_channel_category_and_subject(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 5 * MINUTE)
        assert channel.sent[0] == ("Front door", "Front door open for 5 minutes.", "motion")


class TestResolutionMessages:
    """Suppression and duration rules"""

    def test_close_before_first_notification_is_silent(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 4 * MINUTE)
        router.on_close(tag)
        assert channel.sent == []
        assert scheduler.next_due() is None

    def test_motion_rounds_up(self, make_router, tag, channel, clock, scheduler):
        router = make_router(initial=1, repeat=0)
        router.on_open(tag)
        advance(clock, scheduler, 90)
        router.on_close(tag)
        assert channel.messages == [
            "Front door open for 1 minute.",
            "Front door closed after being open for 2 minutes.",
        ]

    def test_disarm_after_notification(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, 7 * MINUTE)
        tag.updated = router.on_update
        tag.apply_event('updated', event_state=EventState.DISARMED)

        assert channel.messages[-1] == "Front door disarmed after being open for 7 minutes."
        assert router.motion_sessions == {}

    def test_disarm_before_notification_is_silent(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        advance(clock, scheduler, MINUTE)
        tag.event_state = EventState.DISARMED
        router.on_update(tag)
        assert channel.sent == []
        assert router.motion_sessions == {}

    def test_update_while_armed_keeps_session(self, router, tag):
        router.on_open(tag)
        router.on_update(tag)
        assert tag.uuid in router.motion_sessions


class TestTemperature:
    """Temperature crossing sessions"""

    def cross(self, router, tag, state):
        tag.temperature_state = state
        router.on_temperature_cross(tag)

    def test_high_creates_session(self, router, tag):
        self.cross(router, tag, TemperatureState.HIGH)
        session = router.get_session(SessionKind.TEMPERATURE, tag.uuid)
        assert session is not None
        assert router.motion_sessions == {}

    def test_normal_without_session_is_noop(self, router, tag):
        self.cross(router, tag, TemperatureState.NORMAL)
        assert router.temperature_sessions == {}

    def test_scenario_oscillation_then_normal_is_silent(self, router, tag, channel, clock, scheduler):
        self.cross(router, tag, TemperatureState.HIGH)
        first = router.get_session(SessionKind.TEMPERATURE, tag.uuid)

        advance(clock, scheduler, MINUTE)
        self.cross(router, tag, TemperatureState.HIGH)
        assert router.get_session(SessionKind.TEMPERATURE, tag.uuid) is first

        advance(clock, scheduler, 30)
        self.cross(router, tag, TemperatureState.NORMAL)

        assert channel.sent == []
        assert router.temperature_sessions == {}
        assert scheduler.next_due() is None

    def test_high_to_low_keeps_trigger_time(self, router, tag, channel, clock, scheduler):
        self.cross(router, tag, TemperatureState.HIGH)
        advance(clock, scheduler, MINUTE)
        self.cross(router, tag, TemperatureState.LOW)
        advance(clock, scheduler, MINUTE)
        assert channel.messages == ["Front door temperature too low for 2 minutes."]

    def test_notification_and_return_to_normal(self, router, tag, channel, clock, scheduler):
        self.cross(router, tag, TemperatureState.HIGH)
        advance(clock, scheduler, 2 * MINUTE)
        assert channel.sent == [("Front door", "Front door temperature too high for 2 minutes.", "temperature")]

        advance(clock, scheduler, 30)
        self.cross(router, tag, TemperatureState.NORMAL)
        assert channel.messages[-1] == "Front door temperature returned to normal after 3 minutes."

    def test_round_to_nearest_at_ninety_seconds(self, make_router, tag, channel, clock, scheduler):
        router = make_router(temperature=1, repeat=0)
        self.cross(router, tag, TemperatureState.LOW)
        advance(clock, scheduler, 90)
        self.cross(router, tag, TemperatureState.NORMAL)
        assert channel.messages == [
            "Front door temperature too low for 1 minute.",
            "Front door temperature returned to normal after 2 minutes.",
        ]

    def test_zero_minutes_reads_less_than_one_minute(self, make_router, tag, channel, clock, scheduler):
        router = make_router(temperature=0, repeat=0)
        self.cross(router, tag, TemperatureState.HIGH)
        advance(clock, scheduler, 10)
        self.cross(router, tag, TemperatureState.NORMAL)
        assert channel.messages == [
            "Front door temperature too high for less than 1 minute.",
            "Front door temperature returned to normal after less than 1 minute.",
        ]

    def test_monitoring_disarmed_via_update(self, router, tag, channel, clock, scheduler):
        self.cross(router, tag, TemperatureState.HIGH)
        advance(clock, scheduler, 4 * MINUTE)
        tag.temperature_state = TemperatureState.NOT_MONITORING
        router.on_update(tag)
        assert channel.messages[-1] == (
            "Front door temperature monitoring disarmed after being out of range for 4 minutes."
        )
        assert router.temperature_sessions == {}

    def test_update_handles_both_kinds_independently(self, router, tag, channel, clock, scheduler):
        router.on_open(tag)
        self.cross(router, tag, TemperatureState.HIGH)
        advance(clock, scheduler, 6 * MINUTE)

        tag.event_state = EventState.DISARMED
        tag.temperature_state = TemperatureState.NOT_MONITORING
        router.on_update(tag)

        assert router.motion_sessions == {}
        assert router.temperature_sessions == {}
        assert "Front door disarmed after being open for 6 minutes." in channel.messages
        assert (
            "Front door temperature monitoring disarmed after being out of range for 6 minutes."
            in channel.messages
        )


class TestShutdown:
    """Application stop sweep"""

    def test_shutdown_tears_down_everything_silently(self, router, make_tag, channel, clock, scheduler):
        door = make_tag('S1', 'Front door')
        window = make_tag('S2', 'Window')
        router.on_open(door)
        door.temperature_state = TemperatureState.HIGH
        router.on_temperature_cross(door)
        router.on_open(window)
        advance(clock, scheduler, 6 * MINUTE)
        sent_before = len(channel.sent)

        router.shutdown()

        assert router.motion_sessions == {}
        assert router.temperature_sessions == {}
        assert len(channel.sent) == sent_before
        assert scheduler.next_due() is None

    def test_shutdown_is_idempotent_and_blocks_new_sessions(self, router, tag):
        router.shutdown()
        router.shutdown()
        router.on_open(tag)
        assert router.motion_sessions == {}


class TestStaleTimers:
    """Timer fires that outlive their session"""

    def test_fire_for_replaced_session_is_ignored(self, router, tag, channel):
        router.on_open(tag)
        old_ref = router.get_session(SessionKind.MOTION, tag.uuid).ref
        router.on_close(tag)
        router.on_open(tag)

        router._on_timer(old_ref, TimerPurpose.NOTIFICATION)

        assert channel.sent == []
        assert router.get_session(SessionKind.MOTION, tag.uuid).state == SessionState.AWAITING_INITIAL

    def test_sessions_status_snapshot(self, router, tag, clock):
        router.on_open(tag)
        clock.now = 42
        status = router.get_sessions_status()
        assert status == [{
            'kind': 'motion',
            'uuid': 'S1',
            'name': 'Front door',
            'session_id': 1,
            'state': 'awaiting_initial',
            'elapsed_seconds': 42.0,
            'notifications_sent': 0,
            'beeper_engaged': False,
            'beeper_retry_pending': False,
        }]
