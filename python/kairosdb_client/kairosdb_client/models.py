# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
import enum
import math
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from pydantic import (BaseModel, Field, NonNegativeInt, field_validator,
                      model_validator)


# A single point: [timestamp in ms, value].
Item = Tuple[NonNegativeInt, Union[int, float]]


class Unit(str, enum.Enum):
    '''
    Sampling units understood by the KairosDB aggregators.  The server is
    case-insensitive, so Unit('YEARS') and Unit('years') are the same.
    '''
    MILLISECONDS = 'milliseconds'
    SECONDS      = 'seconds'
    MINUTES      = 'minutes'
    HOURS        = 'hours'
    DAYS         = 'days'
    WEEKS        = 'weeks'
    MONTHS       = 'months'
    YEARS        = 'years'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class Sampling(BaseModel):
    value: str
    unit: Unit

    @field_validator('value', mode='before')
    @classmethod
    def _numeric_string(cls, v):
        # The wire format wants a string holding a number.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        try:
            finite = math.isfinite(float(v))
        except (TypeError, ValueError):
            finite = False
        if not finite:
            raise ValueError('sampling value must be a finite number, got %r' %
                             (v,))
        return v


class Aggregator(BaseModel):
    name: str
    align_sampling: bool = False
    sampling: Optional[Sampling] = None


class GrouperType(str, enum.Enum):
    TAG = 'tag'


class Grouper(BaseModel):
    name: GrouperType = GrouperType.TAG
    tags: List[str] = Field(default_factory=list)


class RequestMetric(BaseModel):
    name: Optional[str] = None
    tags: Optional[Dict[str, List[str]]] = None
    group_by: Optional[List[Grouper]] = None
    aggregators: Optional[List[Aggregator]] = None

    def put_tag(self, key, values):
        if self.tags is None:
            self.tags = {}
        self.tags[key] = list(values)
        return self


class Request(BaseModel):
    '''
    A datapoints query or delete request.  Times are absolute milliseconds
    since the epoch.
    '''
    cache_time: int = 0
    start_absolute: NonNegativeInt = 0
    end_absolute: Optional[NonNegativeInt] = None
    time_zone: Optional[str] = None
    metrics: List[RequestMetric] = Field(default_factory=list)

    @model_validator(mode='after')
    def _ordered_range(self):
        if (self.end_absolute is not None and
                self.start_absolute > self.end_absolute):
            raise ValueError('start_absolute %d is after end_absolute %d' %
                             (self.start_absolute, self.end_absolute))
        return self

    def add_metric(self, metric):
        self.metrics.append(metric)
        return self


class Result(BaseModel):
    name: str
    tags: Dict[str, List[str]] = Field(default_factory=dict)
    values: List[Item] = Field(default_factory=list)

    def as_arrays(self):
        '''
        Returns the points as a (timestamps, values) pair of numpy arrays.
        '''
        timestamps = np.array([v[0] for v in self.values], dtype=np.int64)
        values     = np.array([v[1] for v in self.values], dtype=np.float64)
        return timestamps, values


class QueryResponse(BaseModel):
    sample_size: NonNegativeInt = 0
    results: List[Result] = Field(default_factory=list)


class Response(BaseModel):
    queries: List[QueryResponse] = Field(default_factory=list)
    errors: Optional[List[str]] = None


class MetricNames(BaseModel):
    results: List[str]


class Incoming(BaseModel):
    '''
    One series of points to ingest.  KairosDB rejects series with no tags.
    '''
    name: str
    tags: Dict[str, str] = Field(default_factory=dict)
    datapoints: List[Item] = Field(default_factory=list)

    def put_tag(self, key, value):
        self.tags[key] = value
        return self

    def set_values(self, items):
        self.datapoints = list(items)
        return self


class CountingSettings(BaseModel):
    interval: int
    dead_interval: int
