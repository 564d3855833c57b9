import json
import re

import pytest
from pydantic import ValidationError

from checkin import crud
from checkin.core.exceptions import (
    AlreadyScannedError,
    GenerationExhaustedError,
    InvalidDayError,
    NotFoundError,
)
from checkin.schemas import BadgeCreate, BadgeType, BadgeUpdate
from checkin.services.badge_service import BadgeService


@pytest.fixture
def service(store):
    return BadgeService(store)


def multiday(service, days, **fields):
    return service.create_badge(BadgeCreate(name="Grace", type=BadgeType.MULTIDAY, days=days, **fields))


def test_create_regular_badge_defaults_to_all_days(service):
    badge = service.create_badge(BadgeCreate(name="  Ada  ", department="Ops", email="ada@example.com"))

    assert re.fullmatch(r"BDG-\d{6}", badge.badge_id)
    assert badge.name == "Ada"
    assert badge.type == BadgeType.BADGE
    assert badge.days == [1, 2, 3, 4]
    assert service.get_badge(badge.badge_id) == badge


def test_badge_details_validation():
    with pytest.raises(ValidationError):
        BadgeCreate(name="Grace", type=BadgeType.MULTIDAY)
    with pytest.raises(ValidationError):
        BadgeCreate(name="Grace", days=[5])
    with pytest.raises(ValidationError):
        BadgeCreate(name="Grace", days=[])
    with pytest.raises(ValidationError):
        BadgeCreate(name="")
    with pytest.raises(ValidationError):
        BadgeCreate(name="   ")

    details = BadgeCreate(name="Grace", type="Multiday Badge", days=[3, 1, 3], email=" ", companion="")
    assert details.days == [1, 3]
    assert details.email is None
    assert details.companion is None


def test_multiday_check_in_outside_valid_days(service):
    badge = multiday(service, [2, 3])

    with pytest.raises(InvalidDayError) as exc_info:
        service.check_in(badge.badge_id, 1)

    assert exc_info.value.to_dict()["badgeValidDays"] == [2, 3]
    assert service.get_badge(badge.badge_id).check_in_history == []


def test_multiday_check_in_requires_a_day(service):
    badge = multiday(service, [2, 3])
    with pytest.raises(InvalidDayError):
        service.check_in(badge.badge_id)


def test_multiday_second_scan_same_day_is_rejected(service):
    badge = multiday(service, [2, 3])

    first = service.check_in(badge.badge_id, 2)
    assert [entry.day for entry in first.check_in_history] == [2]
    assert [scan.day for scan in first.scan_history] == [2]

    with pytest.raises(AlreadyScannedError) as exc_info:
        service.check_in(badge.badge_id, 2)

    assert exc_info.value.to_dict()["day"] == 2
    assert len(service.get_badge(badge.badge_id).check_in_history) == 1

    third = service.check_in(badge.badge_id, 3)
    assert [entry.day for entry in third.check_in_history] == [2, 3]


def test_legacy_scan_without_day_counts_as_day_one(service, store):
    badge = multiday(service, [1, 2])
    row_number, row = crud.badge.find(store, badge.badge_id)
    row[3] = '[{"timestamp":"2025-01-01T08:00:00.000Z"}]'
    store.write_range(crud.badge.row_range(row_number), [row])

    with pytest.raises(AlreadyScannedError):
        service.check_in(badge.badge_id, 1)
    assert len(service.check_in(badge.badge_id, 2).check_in_history) == 2


def test_regular_badge_scans_repeatedly_without_day(service, store):
    badge = service.create_badge(BadgeCreate(name="Ada"))

    service.check_in(badge.badge_id)
    again = service.check_in(badge.badge_id)

    assert len(again.check_in_history) == 2
    assert again.scan_history == []
    _, row = crud.badge.find(store, badge.badge_id)
    assert all("day" not in entry for entry in json.loads(row[3]))


def test_check_in_missing_badge(service):
    with pytest.raises(NotFoundError):
        service.check_in("BDG-000000", 1)


def test_reset_clears_history(service):
    badge = multiday(service, [1])
    service.check_in(badge.badge_id, 1)

    reset = service.reset_badge(badge.badge_id)

    assert reset.check_in_history == []
    assert reset.scan_history == []
    assert len(service.check_in(badge.badge_id, 1).check_in_history) == 1


def test_update_details_keeps_history(service):
    badge = service.create_badge(BadgeCreate(name="Ada", department="Ops"))
    service.check_in(badge.badge_id)

    updated = service.update_badge_details(
        badge.badge_id,
        BadgeUpdate(name="Ada L.", department="Press", type=BadgeType.MULTIDAY, days=[4], companion="Bob"),
    )

    assert updated.name == "Ada L."
    assert updated.type == BadgeType.MULTIDAY
    assert updated.days == [4]
    assert updated.companion == "Bob"
    assert len(updated.check_in_history) == 1
    assert service.get_badge(badge.badge_id) == updated


def test_update_missing_badge(service):
    with pytest.raises(NotFoundError):
        service.update_badge_details("BDG-000000", BadgeUpdate(name="Nobody"))


def test_list_badges_filters_by_type(service):
    service.create_badge(BadgeCreate(name="Ada"))
    multiday(service, [1, 2])

    assert len(service.list_badges()) == 2
    assert [b.name for b in service.list_badges(BadgeType.MULTIDAY)] == ["Grace"]
    assert [b.name for b in service.list_badges(BadgeType.BADGE)] == ["Ada"]


def test_badge_id_generation_gives_up(service, monkeypatch):
    calls = []

    def always_exists(store, badge_id):
        calls.append(badge_id)
        return True

    monkeypatch.setattr(crud.badge, "exists", always_exists)

    with pytest.raises(GenerationExhaustedError):
        service.create_badge(BadgeCreate(name="Ada"))
    assert len(calls) == 10
