"""Tests for daily statistics."""

from datetime import UTC, date, datetime

import pytest

from calories_info.domain.errors import InputValidationError
from calories_info.domain.logs import LogEntry
from calories_info.domain.nutrition import MacroProfile
from calories_info.domain.stats import DailyTargets, LoggedFood
from calories_info.services.stats import StatsService, build_daily_stats
from tests.conftest import APPLE, InMemoryFoodStore, InMemoryStatsRepository


def _row(log_id: int, grams: float, occurred_at: datetime) -> LoggedFood:
    return LoggedFood(
        log_id=log_id,
        dictionary_id=1,
        product="Apple",
        meal_type="unspecified",
        quantity_grams=grams,
        occurred_at=occurred_at,
        macros_100=APPLE,
    )


def test_build_daily_stats_sums_contributions_in_order() -> None:
    noon = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    morning = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)
    rows = [_row(3, 50, noon), _row(2, 100, noon), _row(1, 200, morning)]

    stats = build_daily_stats(date(2024, 3, 1), rows, DailyTargets())

    assert [item.log_id for item in stats.items] == [1, 2, 3]
    assert stats.totals.kcal == pytest.approx(52 * 3.5)
    assert stats.totals.carbs == pytest.approx(14 * 3.5)
    assert stats.remaining is None


def test_remaining_is_clamped_at_zero() -> None:
    rows = [_row(1, 1000, datetime(2024, 3, 1, 12, 0, tzinfo=UTC))]
    targets = DailyTargets(kcal=2000, protein=1, fat=70, carbs=100)

    stats = build_daily_stats(date(2024, 3, 1), rows, targets)

    assert stats.remaining == MacroProfile(
        kcal=pytest.approx(1480),
        protein=0.0,
        fat=pytest.approx(68),
        carbs=0.0,
    )


def test_remaining_requires_every_target() -> None:
    targets = DailyTargets(kcal=2000, protein=100, fat=70)

    stats = build_daily_stats(date(2024, 3, 1), [], targets)

    assert stats.totals == MacroProfile.zero()
    assert stats.remaining is None


def test_empty_day_with_targets_has_full_remaining() -> None:
    targets = DailyTargets(kcal=2000, protein=100, fat=70, carbs=250)

    stats = build_daily_stats(date(2024, 3, 1), [], targets)

    assert stats.items == []
    assert stats.remaining == MacroProfile(2000, 100, 70, 250)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-03-01", date(2024, 3, 1)),
        (" 2024-03-01 ", date(2024, 3, 1)),
        ("2024-03-01T23:30:00+00:00", date(2024, 3, 1)),
        (date(2024, 3, 1), date(2024, 3, 1)),
        (datetime(2024, 3, 1, 10, 0, tzinfo=UTC), date(2024, 3, 1)),
    ],
)
def test_parse_day_accepts_dates(
    store: InMemoryFoodStore, value: object, expected: date
) -> None:
    service = StatsService(InMemoryStatsRepository(store))

    assert service.parse_day(value) == expected


@pytest.mark.parametrize("value", ["yesterday", "2024-13-01", "", 20240301])
def test_invalid_date_fails_before_querying(
    store: InMemoryFoodStore, value: object
) -> None:
    repository = InMemoryStatsRepository(store)
    service = StatsService(repository)

    with pytest.raises(InputValidationError):
        service.get_daily_stats(value)
    assert repository.windows == []


def test_missing_date_means_today(store: InMemoryFoodStore) -> None:
    service = StatsService(InMemoryStatsRepository(store))

    assert service.get_daily_stats(None).day == datetime.now(tz=UTC).date()


def test_day_window_follows_configured_timezone(store: InMemoryFoodStore) -> None:
    apple = store.add_entry("Apple")
    repository = InMemoryStatsRepository(store)
    service = StatsService(repository, timezone_name="Europe/Moscow")

    store.logs[1] = LogEntry(
        id=1,
        dictionary_id=apple.id,
        quantity_grams=100,
        meal_type="dinner",
        occurred_at=datetime(2024, 3, 1, 22, 30, tzinfo=UTC),
    )

    first = service.get_daily_stats("2024-03-01")
    second = service.get_daily_stats("2024-03-02")

    assert repository.windows[0] == (
        datetime(2024, 2, 29, 21, 0, tzinfo=UTC),
        datetime(2024, 3, 1, 21, 0, tzinfo=UTC),
    )
    assert first.items == []
    assert [item.log_id for item in second.items] == [1]
    assert service.day_of(datetime(2024, 3, 1, 22, 30)) == date(2024, 3, 2)
