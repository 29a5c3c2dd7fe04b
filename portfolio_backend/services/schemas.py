from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, BinaryIO, Dict, Iterable, Mapping, Optional

from portfolio_backend.services.exceptions import ValidationError

DATE_FORMAT = "%Y-%m-%d"


@dataclass
class ImageUpload:
    """요청에 포함된 업로드 이미지 (원본 파일 이름과 바이트 스트림)"""
    filename: str
    stream: BinaryIO


@dataclass
class UpdateRequest:
    """
    부분 수정(sparse update) 요청.

    fields에는 이번 요청에 실제로 포함된 필드만 들어 있습니다.
    포함되지 않은 필드는 기존 값을 그대로 유지합니다.
    """
    fields: Dict[str, Any] = field(default_factory=dict)
    image: Optional[ImageUpload] = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any], allowed: Iterable[str], image: Optional[ImageUpload] = None) -> "UpdateRequest":
        # 폼에서는 빈 문자열을 '값 없음'으로 취급합니다.
        fields = {}
        for name in allowed:
            value = form.get(name)
            if value is not None and str(value).strip() != "":
                fields[name] = value
        return cls(fields=fields, image=image)

    def has(self, name: str) -> bool:
        return name in self.fields

    def is_empty(self) -> bool:
        return not self.fields and self.image is None


def parse_date(value: str, field_name: str) -> date:
    """'YYYY-MM-DD' 형식의 날짜 문자열을 date로 변환합니다."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name} format, expected yyyy-mm-dd")


def require(values: Mapping[str, Any], *names: str):
    """필수 값이 모두 있는지 확인합니다. 비어 있는 첫 번째 필드 이름으로 오류를 냅니다."""
    for name in names:
        value = values.get(name)
        if value is None or str(value).strip() == "":
            raise ValidationError(f"{name} is required")


def check_pagination(offset: int, limit: int):
    if offset < 0:
        raise ValidationError("Invalid offset value")
    if limit <= 0:
        raise ValidationError("Invalid limit value")
