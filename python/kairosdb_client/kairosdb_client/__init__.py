# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
from .client import (Client,
                     ReadOnlyClient,
                     Connection,
                     items_equal,
                     count_aggregator,
                     KairosException,
                     TransportException,
                     DecodeException,
                     MalformedResponseException,
                     QueryException,
                     UnexpectedStatusException,
                     InvalidArgumentException)
from .models import (Aggregator,
                     CountingSettings,
                     Grouper,
                     GrouperType,
                     Incoming,
                     Item,
                     QueryResponse,
                     Request,
                     RequestMetric,
                     Response,
                     Result,
                     Sampling,
                     Unit)
from .push_queue import PushQueue


__all__ = [
    'Client',
    'ReadOnlyClient',
    'Connection',
    'items_equal',
    'count_aggregator',
    'KairosException',
    'TransportException',
    'DecodeException',
    'MalformedResponseException',
    'QueryException',
    'UnexpectedStatusException',
    'InvalidArgumentException',
    'Aggregator',
    'CountingSettings',
    'Grouper',
    'GrouperType',
    'Incoming',
    'Item',
    'QueryResponse',
    'Request',
    'RequestMetric',
    'Response',
    'Result',
    'Sampling',
    'Unit',
    'PushQueue',
]
