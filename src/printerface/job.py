"""
Job and progress records.

The records are immutable and built fresh for every request or push update.
Members the server didn't report are set to :data:`UNKNOWN` (``-1``, or
``-1.0`` for floats), consumers branch on that value. The wire models in
:mod:`printerface.schema.job` stay ``Optional``, the sentinel is only
introduced by the ``from_api`` mappers below.
"""

__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import json
import math
from typing import Optional

from pydantic import Field, ValidationError

from printerface.exceptions import ProtocolError
from printerface.schema import FrozenModel
from printerface.schema.job import (
    ApiFilamentInfo,
    ApiJobFile,
    ApiJobInfo,
    ApiProgressInfo,
    Number,
)

UNKNOWN = -1


def _to_int(value: Optional[Number]) -> int:
    if value is None:
        return UNKNOWN
    if isinstance(value, int):
        return value
    if not math.isfinite(value):
        return UNKNOWN
    return int(value)


def _to_float(value: Optional[Number]) -> float:
    if value is None:
        return float(UNKNOWN)
    value = float(value)
    if not math.isfinite(value):
        return float(UNKNOWN)
    return value


def _sum_known(values):
    known = [value for value in values if value is not None]
    return sum(known) if known else None


class FileInfo(FrozenModel):
    name: str = ""
    origin: str = ""
    size: int = UNKNOWN
    date: int = UNKNOWN

    @classmethod
    def from_api(cls, data: Optional[ApiJobFile]) -> "FileInfo":
        if data is None:
            return cls()
        return cls(
            name=data.name or "",
            origin=data.origin or "",
            size=_to_int(data.size),
            date=_to_int(data.date),
        )


class FilamentInfo(FrozenModel):
    length: int = UNKNOWN
    volume: float = float(UNKNOWN)

    @classmethod
    def from_api(cls, data: Optional[ApiFilamentInfo]) -> Optional["FilamentInfo"]:
        """
        Returns ``None`` if the server sent no filament data at all. Per tool
        values are summed up unless flat values are present.
        """
        if data is None or not data.populated:
            return None

        length, volume = data.length, data.volume
        tools = [tool for tool in data.tools.values() if tool is not None]
        if length is None and volume is None and tools:
            length = _sum_known(tool.length for tool in tools)
            volume = _sum_known(tool.volume for tool in tools)

        return cls(length=_to_int(length), volume=_to_float(volume))


class JobInfo(FrozenModel):
    file: FileInfo = Field(default_factory=FileInfo)
    estimated_print_time: int = UNKNOWN
    filament: Optional[FilamentInfo] = None

    @classmethod
    def from_api(cls, data: ApiJobInfo) -> "JobInfo":
        return cls(
            file=FileInfo.from_api(data.file),
            estimated_print_time=_to_int(data.estimatedPrintTime),
            filament=FilamentInfo.from_api(data.filament),
        )


class JobProgress(FrozenModel):
    completion: float = float(UNKNOWN)
    filepos: int = UNKNOWN
    print_time: int = UNKNOWN
    print_time_left: int = UNKNOWN

    @classmethod
    def from_api(cls, data: ApiProgressInfo) -> "JobProgress":
        return cls(
            completion=_to_float(data.completion),
            filepos=_to_int(data.filepos),
            print_time=_to_int(data.printTime),
            print_time_left=_to_int(data.printTimeLeft),
        )

    @property
    def is_running(self) -> bool:
        return self.filepos != UNKNOWN

    def __str__(self):
        if not self.is_running:
            return "No Job found running"
        return (
            f"Completion: {self.completion}\n"
            f"Filepos: {self.filepos}\n"
            f"PrintTime: {self.print_time}\n"
            f"PrintTimeLeft: {self.print_time_left}\n"
        )


def _validate_member(data, key, model):
    if not isinstance(data, dict):
        raise ProtocolError(
            "Expected a JSON object from the server, got {}".format(type(data).__name__)
        )

    member = data.get(key)
    if member is None:
        raise ProtocolError(f"Server response lacks the expected {key!r} entry")

    try:
        return model.model_validate(member)
    except ValidationError as e:
        raise ProtocolError(f"Malformed {key!r} entry in server response", cause=e) from e


def _load_json(body):
    try:
        return json.loads(body)
    except (TypeError, ValueError) as e:
        raise ProtocolError("Server response is not valid JSON", cause=e) from e


def parse_job_info(data: dict) -> JobInfo:
    """
    Maps the ``job`` member of an already decoded job response.

    Raises:
        ProtocolError: ``data`` is not a dict, lacks ``job`` or ``job`` is malformed
    """
    return JobInfo.from_api(_validate_member(data, "job", ApiJobInfo))


def parse_job_progress(data: dict) -> JobProgress:
    """
    Maps the ``progress`` member of an already decoded job response.

    Raises:
        ProtocolError: ``data`` is not a dict, lacks ``progress`` or ``progress`` is malformed
    """
    return JobProgress.from_api(_validate_member(data, "progress", ApiProgressInfo))


def job_info_from_json(body: str) -> JobInfo:
    return parse_job_info(_load_json(body))


def job_progress_from_json(body: str) -> JobProgress:
    return parse_job_progress(_load_json(body))
