"""Wire shape of the server's ``api/job`` resource. Every member may be missing or null."""

from typing import Dict, Optional, Union

from pydantic import Field, model_validator

from printerface.schema import BaseModel

Number = Union[int, float]


class ApiJobFile(BaseModel):
    name: Optional[str] = None
    origin: Optional[str] = None
    size: Optional[Number] = None
    date: Optional[Number] = None


class ApiToolFilament(BaseModel):
    length: Optional[Number] = None
    volume: Optional[Number] = None


class ApiFilamentInfo(ApiToolFilament):
    """
    Filament usage, either flat (``{"length": ..., "volume": ...}``) or per
    tool (``{"tool0": {"length": ..., "volume": ...}, ...}``).
    """

    tools: Dict[str, Optional[ApiToolFilament]] = Field(default_factory=dict)
    populated: bool = False

    @model_validator(mode="before")
    @classmethod
    def _split_tools(cls, data):
        if not isinstance(data, dict):
            return data

        result = {"tools": {}, "populated": bool(data)}
        for key, value in data.items():
            if key in ("length", "volume"):
                result[key] = value
            elif value is None or isinstance(value, dict):
                result["tools"][key] = value
        return result


class ApiJobInfo(BaseModel):
    file: Optional[ApiJobFile] = None
    estimatedPrintTime: Optional[Number] = None
    filament: Optional[ApiFilamentInfo] = None


class ApiProgressInfo(BaseModel):
    completion: Optional[Number] = None
    filepos: Optional[Number] = None
    printTime: Optional[Number] = None
    printTimeLeft: Optional[Number] = None
