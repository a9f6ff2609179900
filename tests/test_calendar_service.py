"""
Tests for the CalendarService orchestration layer.
"""

import pytest

from calview.domain.exceptions import ValidationError
from calview.domain.models import (
    CalendarSettings,
    EventCreate,
    EventDisplayMode,
    EventUpdate,
    Granularity,
    Theme,
    WeekStart,
)
from calview.services.calendar_service import CalendarService

from conftest import InMemoryStore, at, make_event


def _build_service(events=None, timezone="UTC") -> CalendarService:
    return CalendarService(store=InMemoryStore(events), timezone=timezone)


class TestEventsBetween:
    """Range queries through the service."""

    def test_query_is_widened_then_rechecked(self):
        store = InMemoryStore([
            make_event("2024-03-14 22:00", "2024-03-15 00:00", event_id=1),
            make_event("2024-03-15 09:00", "2024-03-15 10:00", event_id=2),
        ])
        service = CalendarService(store)

        events = service.events_between(1, at("2024-03-15 00:00"), at("2024-03-16 00:00"))

        assert [e.id for e in events] == [2]
        _, queried_start, queried_end = store.range_calls[0]
        assert queried_start == at("2024-03-14 00:00")
        assert queried_end == at("2024-03-17 00:00")

    def test_all_day_event_with_late_clock_time_is_found(self):
        offsite = make_event("2024-03-14 23:00", "2024-03-14 23:30", all_day=True)
        service = _build_service([offsite])

        events = service.events_between(1, at("2024-03-14 00:00"), at("2024-03-14 12:00"))

        assert events == [offsite]

    def test_results_are_chronological(self):
        service = _build_service([
            make_event("2024-03-15 15:00", "2024-03-15 16:00", event_id=1),
            make_event("2024-03-15 08:00", "2024-03-15 09:00", event_id=2),
        ])

        events = service.events_between(1, at("2024-03-15"), at("2024-03-16"))

        assert [e.id for e in events] == [2, 1]

    def test_other_users_are_not_returned(self):
        service = _build_service([make_event("2024-03-15 09:00", "2024-03-15 10:00", user_id=2)])

        assert service.events_between(1, at("2024-03-15"), at("2024-03-16")) == []


class TestRenderView:
    """Views assembled from the user's settings."""

    def test_week_view_uses_settings_week_start(self):
        store = InMemoryStore([make_event("2024-03-17 09:00", "2024-03-17 10:00")])
        store.save_settings(1, CalendarSettings(start_of_week=WeekStart.MONDAY))
        service = CalendarService(store)

        view = service.render_view(1, Granularity.WEEK, at("2024-03-15 12:00"))

        assert view.window.start == at("2024-03-11 00:00")
        assert len(view.days) == 7
        assert len(view.days[-1].timed) == 1
        assert view.months == []

    def test_day_view(self):
        service = _build_service([make_event("2024-03-15 09:00", "2024-03-15 10:00")])

        view = service.render_view(1, Granularity.DAY, at("2024-03-15 12:00"))

        assert len(view.days) == 1
        assert view.days[0].timed[0].top_percentage == pytest.approx(37.5)

    def test_month_view_includes_grid_padding_days(self):
        service = _build_service([
            make_event("2024-02-26 09:00", "2024-02-26 10:00", event_id=1),
            make_event("2024-03-15 09:00", "2024-03-15 10:00", event_id=2),
        ])

        view = service.render_view(1, Granularity.MONTH, at("2024-03-15"))

        assert [e.id for e in view.events] == [2]
        grid = view.months[0]
        assert grid.weeks[0][1].count == 1
        assert grid.event_count == 1

    def test_month_view_uses_display_mode(self):
        store = InMemoryStore([
            make_event("2024-03-15 09:00", "2024-03-15 10:00", event_id=i) for i in range(1, 5)
        ])
        store.save_settings(1, CalendarSettings(event_display_mode=EventDisplayMode.BOX))
        service = CalendarService(store)

        view = service.render_view(1, Granularity.MONTH, at("2024-03-15"))

        bucket = next(cell for week in view.months[0].weeks for cell in week if cell.count)
        assert len(bucket.previews) == 2
        assert bucket.overflow == 2

    def test_year_view_has_twelve_months(self):
        service = _build_service([make_event("2024-07-04 09:00", "2024-07-04 10:00")])

        view = service.render_view(1, Granularity.YEAR, at("2024-03-15"))

        assert view.window.label == "2024"
        assert len(view.months) == 12
        assert view.months[6].event_count == 1

    def test_anchor_is_moved_to_display_timezone(self):
        service = _build_service(
            [make_event("2024-03-15 23:30", "2024-03-16 00:30", tz="Europe/Berlin")],
            timezone="Europe/Berlin",
        )

        view = service.render_view(1, Granularity.DAY, at("2024-03-15 23:00", tz="UTC"))

        assert view.window.label == "Saturday, Mar 16, 2024"
        assert view.days[0].timed[0].top_percentage == 0


class TestCrudAndSettings:
    """Pass-through operations."""

    def test_create_requires_user(self, draft):
        service = _build_service()

        with pytest.raises(ValidationError, match="no user id"):
            service.create_event(draft(user_id=None))

    def test_create_update_delete(self, draft):
        service = _build_service()

        event = service.create_event(draft(title="Standup"))
        updated = service.update_event(event.id, EventUpdate(title="Retro"))

        assert updated.title == "Retro"
        assert service.delete_event(event.id)
        assert service.get_event(event.id) is None
        assert not service.delete_event(event.id)

    def test_update_missing_event(self):
        assert _build_service().update_event(99, EventUpdate(title="x")) is None

    def test_settings_default_then_merge(self):
        service = _build_service()

        assert service.get_settings(1) == CalendarSettings()

        saved = service.update_settings(1, {"theme": "light"})
        saved = service.update_settings(1, {"startOfWeek": "monday"})

        assert saved.theme is Theme.LIGHT
        assert saved.start_of_week is WeekStart.MONDAY
        assert service.get_settings(2) == CalendarSettings()

    def test_create_event_fills_color(self):
        service = _build_service()

        event = service.create_event(EventCreate(
            user_id=1,
            title="Lunch",
            start_date=at("2024-03-15 12:00"),
            end_date=at("2024-03-15 13:00"),
        ))

        assert event.color == "#3498db"


class TestSqliteInDisplayTimezone:
    """Events read back from SQLite carry UTC; views use the display timezone."""

    BERLIN = "Europe/Berlin"

    @pytest.fixture
    def service(self, sqlite_store):
        return CalendarService(sqlite_store, timezone=self.BERLIN)

    @staticmethod
    def _counts(view):
        return {
            str(cell.day): cell.count
            for week in view.months[0].weeks
            for cell in week
            if cell is not None and cell.count
        }

    def test_all_day_event_stays_on_its_day(self, service, draft):
        service.create_event(draft(
            start_date=at("2024-03-15 00:00", self.BERLIN),
            end_date=at("2024-03-16 00:00", self.BERLIN),
            all_day=True,
        ))

        month = service.render_view(1, Granularity.MONTH, at("2024-03-15", self.BERLIN))
        week = service.render_view(1, Granularity.WEEK, at("2024-03-15", self.BERLIN))

        assert self._counts(month) == {"2024-03-15": 1}
        assert month.months[0].event_count == 1
        assert [str(day.day) for day in week.days if day.all_day] == ["2024-03-15"]

    def test_all_day_event_in_year_view(self, service, draft):
        service.create_event(draft(
            start_date=at("2024-03-01 00:00", self.BERLIN),
            end_date=at("2024-03-02 00:00", self.BERLIN),
            all_day=True,
        ))

        view = service.render_view(1, Granularity.YEAR, at("2024-03-15", self.BERLIN))

        assert view.months[1].event_count == 0
        assert view.months[2].event_count == 1

    def test_zero_length_event_is_stored_but_not_laid_out(self, service, draft):
        instant = service.create_event(draft(start="2024-03-15 10:00", end="2024-03-15 10:00"))

        fetched = service.get_event(instant.id)
        assert fetched is not None
        assert fetched.start_date == fetched.end_date

        week = service.render_view(1, Granularity.WEEK, at("2024-03-15", self.BERLIN))
        month = service.render_view(1, Granularity.MONTH, at("2024-03-15", self.BERLIN))

        assert all(day.timed == [] for day in week.days)
        assert self._counts(month) == {}
