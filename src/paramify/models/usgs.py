"""Models for the USGS Instantaneous Values JSON payload.

Only the path needed for the latest gage height is modelled::

    value.timeSeries[0].sourceInfo.siteName
    value.timeSeries[0].values[0].value[0].value

Collections default to empty so that a payload missing a level is reported
with a specific message by the parser rather than a generic schema error.
"""

from __future__ import annotations

from pydantic import Field

from paramify.models._base import ParamifyBaseModel


class UsgsValueRecord(ParamifyBaseModel):
    value: str
    date_time: str | None = None


class UsgsValueGroup(ParamifyBaseModel):
    value: list[UsgsValueRecord] = Field(default_factory=list)


class UsgsSiteCode(ParamifyBaseModel):
    value: str


class UsgsSourceInfo(ParamifyBaseModel):
    site_name: str
    site_code: list[UsgsSiteCode] = Field(default_factory=list)


class UsgsTimeSeries(ParamifyBaseModel):
    source_info: UsgsSourceInfo
    values: list[UsgsValueGroup] = Field(default_factory=list)


class UsgsValue(ParamifyBaseModel):
    time_series: list[UsgsTimeSeries] = Field(default_factory=list)


class UsgsResponse(ParamifyBaseModel):
    value: UsgsValue
