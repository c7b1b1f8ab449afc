"""JSON payload <-> holiday model conversion (camelCase on the wire, YYYY-MM-DD dates)."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from ..common.datetime_utils import format_date, parse_optional_date
from ..common.validators import optional_int, parse_bool, require_positive_int
from ..core.enums import ApplyChildType, HolidaySourceType, OwnerType
from ..core.exceptions import RowError, ValidationError
from .model import (
    HolidayListItem,
    HolidayOwnerView,
    HolidayRecord,
    HolidaySaveBundle,
    HolidayView,
    Page,
    ParentHolidayOperatingSetting,
)

T = TypeVar("T")


def _enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        raise ValidationError(f"{field_name} 값이 올바르지 않습니다: {value}")


def parse_owner_type(value: Any) -> OwnerType:
    return _enum(OwnerType, value, "ownerType")


def _apply_child_types(info: Mapping[str, Any]) -> tuple:
    raw = info.get("applyChildTypes")
    if raw is None and info.get("applyChildType"):
        raw = [info["applyChildType"]]
    if raw is not None and not isinstance(raw, list):
        raise ValidationError("applyChildTypes 형식이 올바르지 않습니다.")
    # keep order, drop repeats
    out: List[ApplyChildType] = []
    for v in raw or []:
        child = _enum(ApplyChildType, v, "applyChildTypes")
        if child not in out:
            out.append(child)
    return tuple(out)


def parse_holiday_info(info: Mapping[str, Any], *, owner_type: OwnerType, owner_id: Optional[int], year: int) -> HolidayRecord:
    has_period = parse_bool(info.get("hasPeriod"))
    holiday_id = info.get("holidayId", info.get("id"))
    name = info.get("holidayName")
    if name is not None and not isinstance(name, str):
        raise ValidationError("holidayName 형식이 올바르지 않습니다.")
    return HolidayRecord(
        holiday_id=optional_int(holiday_id, "holidayId"),
        owner_type=owner_type,
        owner_id=owner_id,
        year=year,
        name=name or "",
        has_period=has_period,
        start_date=parse_optional_date(info.get("startDate"), "startDate"),
        end_date=parse_optional_date(info.get("endDate"), "endDate") if has_period else None,
        is_operating=parse_bool(info.get("isOperating")),
        apply_child_types=_apply_child_types(info),
    )


def parse_parent_setting(item: Mapping[str, Any]) -> ParentHolidayOperatingSetting:
    return ParentHolidayOperatingSetting(
        source_type=_enum(HolidaySourceType, item.get("holidaySourceType"), "holidaySourceType"),
        source_id=require_positive_int(item.get("holidaySourceId"), "holidaySourceId"),
        is_operating=parse_bool(item.get("isOperating")),
    )


def _parse_rows(items: Any, field_name: str, parse: Callable[[Mapping[str, Any]], T]) -> List[T]:
    """Parse a list of row objects; a bad row is reported with its 0-based index."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError(f"{field_name} 형식이 올바르지 않습니다.")
    out: List[T] = []
    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            message = f"{i + 1}번째 행의 형식이 올바르지 않습니다."
            raise ValidationError(message, [RowError(i, field_name, message)])
        try:
            out.append(parse(item))
        except ValidationError as e:
            if e.errors:
                raise
            message = f"{i + 1}번째 행: {e}"
            raise ValidationError(message, [RowError(i, field_name, message)]) from e
    return out


def parse_save_request(payload: Mapping[str, Any], *, year: Optional[int] = None) -> HolidaySaveBundle:
    """Parse a create/update body; ``year`` comes from the URL, the body, or the first dated record."""
    if not isinstance(payload, Mapping):
        raise ValidationError("요청 형식이 올바르지 않습니다.")

    owner_type = parse_owner_type(payload.get("ownerType"))
    owner_id = require_positive_int(payload.get("ownerId"), "ownerId")
    year = year or optional_int(payload.get("year"), "year")
    records = _parse_rows(
        payload.get("holidayInfos"),
        "holidayInfos",
        lambda info: parse_holiday_info(info, owner_type=owner_type, owner_id=owner_id, year=year or 0),
    )
    if year is None:
        dated = [rec.start_date for rec in records if rec.start_date is not None]
        if not dated:
            raise ValidationError("연도를 확인할 수 없습니다.")
        year = dated[0].year

    settings = _parse_rows(payload.get("parentHolidaySettings"), "parentHolidaySettings", parse_parent_setting)
    return HolidaySaveBundle(
        owner_type=owner_type,
        owner_id=owner_id,
        year=int(year),
        records=tuple(records),
        parent_settings=tuple(settings),
    )


def parse_legal_request(payload: Any, *, year: Optional[int] = None) -> List[HolidayRecord]:
    if not isinstance(payload, list):
        raise ValidationError("요청 형식이 올바르지 않습니다.")
    return _parse_rows(
        payload,
        "holidayInfos",
        lambda item: parse_holiday_info(item, owner_type=OwnerType.LEGAL, owner_id=None, year=year or 0),
    )


def dump_view(view: HolidayView) -> Dict[str, Any]:
    rec = view.source
    data: Dict[str, Any] = {
        "id": rec.holiday_id,
        "holidayName": rec.name,
        "hasPeriod": rec.has_period,
        "startDate": format_date(rec.start_date),
        "endDate": format_date(rec.end_date) if rec.has_period else None,
        "holidayType": rec.owner_type.value,
        "isOperating": view.effective_is_operating,
        "isInherited": view.is_inherited,
        "badgeLevel": view.badge_level.value,
    }
    if rec.owner_type != OwnerType.STORE:
        data["applyChildTypes"] = [c.value for c in rec.apply_child_types]
    return data


def dump_owner_view(view: HolidayOwnerView) -> Dict[str, Any]:
    return {
        "holidayOwnType": view.owner_type.value,
        "ownerId": view.owner_id,
        "ownerName": view.owner_name,
        "headOfficeName": view.head_office_name,
        "franchiseName": view.franchise_name,
        "year": view.year,
        "infos": [dump_view(v) for v in view.infos],
    }


def dump_legal(rec: HolidayRecord) -> Dict[str, Any]:
    return {
        "id": rec.holiday_id,
        "holidayName": rec.name,
        "hasPeriod": rec.has_period,
        "startDate": format_date(rec.start_date),
        "endDate": format_date(rec.end_date) if rec.has_period else None,
    }


def dump_list_item(item: HolidayListItem) -> Dict[str, Any]:
    return {
        "year": item.year,
        "holidayType": item.holiday_type.value,
        "headOfficeId": item.head_office_id,
        "headOfficeName": item.head_office_name,
        "franchiseId": item.franchise_id,
        "franchiseName": item.franchise_name,
        "storeId": item.store_id,
        "storeName": item.store_name,
        "holidayCount": item.holiday_count,
        "updatedAt": item.updated_at.isoformat() if item.updated_at else None,
    }


def dump_page(page: Page) -> Dict[str, Any]:
    return {
        "content": [dump_list_item(i) for i in page.content],
        "pageNumber": page.page_number,
        "pageSize": page.page_size,
        "totalElements": page.total_elements,
        "totalPages": page.total_pages,
        "isFirst": page.is_first,
        "isLast": page.is_last,
        "hasNext": page.has_next,
    }


def dump_errors(errors: Sequence[RowError]) -> List[Dict[str, Any]]:
    return [{"row": e.row, "field": e.field, "message": e.message} for e in errors]
