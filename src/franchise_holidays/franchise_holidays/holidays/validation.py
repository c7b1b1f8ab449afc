from __future__ import annotations

from typing import List, Optional, Sequence

from ..core.enums import OwnerType
from ..core.exceptions import RowError, ValidationError
from .model import HolidayRecord


class ValidationGate:
    """Authoring checks for an owner's own draft records.

    Every row is checked and every violation is reported, so the caller can point at
    each offending row. Rows that belong to another owner are inherited and skipped.
    """

    def validate(
        self,
        owner_type: OwnerType,
        drafts: Sequence[HolidayRecord],
        *,
        year: Optional[int] = None,
    ) -> List[RowError]:
        errors: List[RowError] = []
        for i, rec in enumerate(drafts):
            if rec.owner_type != owner_type:
                continue
            n = i + 1

            if not (rec.name or "").strip():
                errors.append(RowError(i, "holidayName", f"{n}번째 행의 휴일명을 입력해주세요."))

            if rec.start_date is None:
                errors.append(RowError(i, "startDate", f"{n}번째 행의 날짜를 입력해주세요."))

            if rec.has_period:
                if rec.end_date is None:
                    errors.append(RowError(i, "endDate", f"{n}번째 행의 종료일을 입력해주세요."))
                elif rec.start_date is not None and rec.end_date < rec.start_date:
                    errors.append(RowError(i, "endDate", f"{n}번째 행의 종료일이 시작일보다 빠릅니다."))

            if rec.apply_child_types and owner_type == OwnerType.STORE:
                errors.append(RowError(i, "applyChildTypes", f"{n}번째 행: 점포 휴일에는 적용 대상을 지정할 수 없습니다."))

            if year is not None and rec.start_date is not None and rec.start_date.year != int(year):
                errors.append(RowError(i, "startDate", f"{n}번째 행의 날짜가 {year}년이 아닙니다."))

        return errors

    def check(self, owner_type: OwnerType, drafts: Sequence[HolidayRecord], *, year: Optional[int] = None) -> None:
        errors = self.validate(owner_type, drafts, year=year)
        if errors:
            raise ValidationError(errors[0].message, errors)
