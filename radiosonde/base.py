"""라디오존데 기반 모델 정의입니다. / Base definitions for radiosonde models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class RadiosondeModel(BaseModel):
    """불변 레코드의 공통 베이스입니다. / Common base for immutable records.

    Enum fields hold their string values so persisted snapshots stay plain JSON.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True,
        use_enum_values=True,
        validate_assignment=True,
    )

    def model_dump_jsonable(self, **kwargs: Any) -> dict[str, Any]:
        """저장용 JSON 덤프입니다. / Dump a JSON-ready dict for persistence."""

        return self.model_dump(mode="json", **kwargs)
