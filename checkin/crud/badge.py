from typing import Dict, List

from checkin.core.config import settings
from checkin.crud.base import SheetCRUDBase, dump_json, format_timestamp, load_json_list, parse_entries, parse_enum
from checkin.db.sheets import RowStore
from checkin.schemas.badge import EVENT_DAYS, Badge, BadgeDetails, BadgeType, CheckIn, ScanDay

BADGE_HEADER = ["Badge ID", "Name", "Department", "Check-in History", "Type", "Days", "Email", "Companion"]
BADGE_DEFAULTS = ["", "", "", "[]", BadgeType.BADGE.value, dump_json(EVENT_DAYS), "", ""]


def parse_days(raw: str) -> List[int]:
    """Valid event days from a Days cell; blank, malformed or empty cells mean every day."""
    days = sorted({day for day in load_json_list(raw) if type(day) is int and day in EVENT_DAYS})
    return days or list(EVENT_DAYS)


def build_scan_history(badge_type: BadgeType, check_ins: List[CheckIn]) -> List[ScanDay]:
    """Group multiday check-ins by event day; a check-in without a day counts as day 1."""
    if badge_type != BadgeType.MULTIDAY:
        return []
    groups: Dict[int, list] = {}
    for check_in in check_ins:
        groups.setdefault(check_in.day or 1, []).append(check_in.timestamp)
    return [ScanDay(day=day, timestamps=timestamps) for day, timestamps in groups.items()]


class CRUDBadge(SheetCRUDBase[Badge]):
    def to_model(self, row: List[str]) -> Badge:
        row = self.pad(row)
        badge_type = parse_enum(BadgeType, row[4], BadgeType.BADGE)
        check_ins = parse_entries(CheckIn, load_json_list(row[3]), "check-in")
        return Badge(
            badge_id=row[0],
            name=row[1],
            department=row[2],
            check_in_history=check_ins,
            type=badge_type,
            days=parse_days(row[5]),
            email=row[6] or None,
            companion=row[7] or None,
            scan_history=build_scan_history(badge_type, check_ins),
        )

    def to_row(self, obj: Badge) -> List[str]:
        history = []
        for check_in in obj.check_in_history:
            entry = {"timestamp": format_timestamp(check_in.timestamp)}
            if check_in.day is not None:
                entry["day"] = check_in.day
            history.append(entry)
        return [
            obj.badge_id,
            obj.name,
            obj.department,
            dump_json(history),
            obj.type.value,
            dump_json(obj.days),
            obj.email or "",
            obj.companion or "",
        ]

    def create(self, store: RowStore, *, badge_id: str, obj_in: BadgeDetails) -> Badge:
        badge = Badge(badge_id=badge_id, **obj_in.model_dump())
        self.append(store, [self.to_row(badge)])
        return self.to_model(self.to_row(badge))

    def apply_details(self, current: Badge, obj_in: BadgeDetails) -> Badge:
        return current.model_copy(update=obj_in.model_dump())


badge = CRUDBadge(Badge, BADGE_HEADER, BADGE_DEFAULTS, sheet=settings.BADGE_SHEET_TITLE)
