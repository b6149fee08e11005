# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
import logging
import time
from urllib.parse import quote

import httpx
import pydantic

from .models import (Aggregator,
                     MetricNames,
                     Request,
                     RequestMetric,
                     Response,
                     Sampling,
                     Unit)


logger = logging.getLogger(__name__)

DEFAULT_URL     = 'http://127.0.0.1:8080'
DEFAULT_TIMEOUT = 30.0

# Sampling window for a count aggregator that covers all of history.
ALL_YEARS = 999999


class KairosException(Exception):
    pass


class TransportException(KairosException):
    pass


class DecodeException(KairosException):
    pass


class MalformedResponseException(DecodeException):
    pass


class QueryException(KairosException):
    def __init__(self, errors):
        super().__init__('\n'.join(errors))
        self.errors = list(errors)


class UnexpectedStatusException(KairosException):
    def __init__(self, status_code, text):
        super().__init__(text)
        self.status_code = status_code
        self.text        = text


class InvalidArgumentException(KairosException, ValueError):
    pass


def count_aggregator():
    return Aggregator(name='count', align_sampling=True,
                      sampling=Sampling(value=str(ALL_YEARS), unit=Unit.YEARS))


def items_equal(left, right):
    '''
    Order-sensitive comparison of two lists of [timestamp, value] points.
    '''
    if len(left) != len(right):
        return False
    for l, r in zip(left, right):
        if l[0] != r[0]:
            return False
        if l[1] != r[1]:
            return False
    return True


def _dump(obj):
    if isinstance(obj, (list, tuple)):
        return [_dump(o) for o in obj]
    return obj.model_dump(mode='json', exclude_none=True)


def _check_request(request):
    if not request.metrics:
        raise InvalidArgumentException('Request has no metrics.')
    if (request.end_absolute is not None and
            request.start_absolute > request.end_absolute):
        raise InvalidArgumentException(
            'start_absolute %d is after end_absolute %d.' %
            (request.start_absolute, request.end_absolute))


def _first_query(response):
    if not response.queries:
        raise MalformedResponseException('Response contains no queries.')
    return response.queries[0]


def _first_result(response):
    query = _first_query(response)
    if not query.results:
        raise MalformedResponseException('Query contains no results.')
    return query.results[0]


def _count_from(response):
    if not _first_query(response).sample_size:
        return 0
    result = _first_result(response)
    if not result.values:
        raise MalformedResponseException('Count result contains no values.')
    return int(result.values[0][1])


class Connection:
    '''
    Pooled HTTP connection to the /api/v1 root of a KairosDB server.
    '''
    def __init__(self, url=DEFAULT_URL, credentials=None,
                 timeout=DEFAULT_TIMEOUT, keep_alive=True, transport=None):
        auth = None
        if credentials:
            assert len(credentials) == 2
            auth = httpx.BasicAuth(*credentials)

        if keep_alive:
            limits = httpx.Limits()
        else:
            limits = httpx.Limits(max_keepalive_connections=0)

        self.limits   = limits
        self.base_url = url.rstrip('/') + '/api/v1'
        self.http     = httpx.Client(base_url=self.base_url, auth=auth,
                                     timeout=timeout, limits=limits,
                                     transport=transport)

    def close(self):
        self.http.close()

    def _request(self, method, path, **kwargs):
        logger.debug('%s %s%s', method, self.base_url, path)
        try:
            return self.http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise TransportException('%s %s failed: %s' % (method, path, e)) \
                from e

    def _decode(self, response, model):
        try:
            return model.model_validate_json(response.content)
        except pydantic.ValidationError as e:
            raise DecodeException('Unexpected response to %s (HTTP %d): %s' %
                                  (response.request.url.path,
                                   response.status_code, e)) from e

    @staticmethod
    def _expect_no_content(response):
        if response.status_code != 204:
            raise UnexpectedStatusException(response.status_code,
                                            response.text)

    def get_json(self, path, model, params=None):
        return self._decode(self._request('GET', path, params=params), model)

    def post_json(self, path, payload, model):
        return self._decode(self._request('POST', path, json=_dump(payload)),
                            model)

    def post_no_content(self, path, payload):
        self._expect_no_content(self._request('POST', path,
                                              json=_dump(payload)))

    def delete_no_content(self, path):
        self._expect_no_content(self._request('DELETE', path))


class ReadOnlyClient:
    '''
    Client that only issues requests which cannot change or erase stored
    data.  The connection is opened on first use and kept alive until
    close() is called.

    With raise_errors=False, read() hands back responses carrying an errors
    list instead of raising QueryException.
    '''
    def __init__(self, url=DEFAULT_URL, credentials=None,
                 timeout=DEFAULT_TIMEOUT, keep_alive=True, raise_errors=True,
                 transport=None):
        self.url          = url
        self.credentials  = credentials
        self.timeout      = timeout
        self.keep_alive   = keep_alive
        self.raise_errors = raise_errors
        self.transport    = transport
        self.conn         = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def connect(self):
        assert self.conn is None
        self.conn = Connection(url=self.url, credentials=self.credentials,
                               timeout=self.timeout,
                               keep_alive=self.keep_alive,
                               transport=self.transport)

    def close(self):
        if self.conn is not None:
            try:
                self.conn.close()
            finally:
                self.conn = None

    def _connection(self):
        if self.conn is None:
            self.connect()
        return self.conn

    def _check_errors(self, response):
        if response.errors and self.raise_errors:
            raise QueryException(response.errors)

    def get_metric_names(self, prefix=None):
        params = {'prefix': prefix} if prefix is not None else None
        names = self._connection().get_json('/metricnames', MetricNames,
                                            params=params)
        return names.results

    def get_metric_tags(self, metric_name):
        request = Request(cache_time=0, start_absolute=0,
                          metrics=[RequestMetric(name=metric_name, tags={})])
        response = self._connection().post_json('/datapoints/query/tags',
                                                request, Response)
        self._check_errors(response)
        return _first_result(response).tags

    def read(self, request):
        _check_request(request)
        response = self._connection().post_json('/datapoints/query', request,
                                                Response)
        self._check_errors(response)
        return response

    def create_simple_request(self, metric_name, tags=None):
        metric = RequestMetric(name=metric_name)
        if tags is not None:
            metric.tags = tags
        return Request(cache_time=0, start_absolute=1, metrics=[metric])

    def read_count(self, request):
        '''
        Counts every point matched by the request.  The request passed in is
        left untouched.
        '''
        request = request.model_copy(deep=True)
        for m in request.metrics:
            m.aggregators = [count_aggregator()]
        return _count_from(self.read(request))

    def read_count_long(self, metric_name, tags, settings):
        '''
        Estimates the number of points in a series by counting backwards from
        now in windows of settings.interval ms.  The walk stops once
        settings.dead_interval ms have passed since the last window holding
        any points, or at the epoch.  Data older than such a gap is not
        counted, so the result is only exact for series without long holes.
        '''
        if not settings.interval > 1:
            raise InvalidArgumentException(
                'settings.interval must be greater than 1, got %r' %
                settings.interval)

        request = self.create_simple_request(metric_name, tags)
        # TODO: check whether the server applies the window bounds when this
        # full-history aggregator is attached; it is carried over from
        # read_count unchanged.
        request.metrics[0].aggregators = [count_aggregator()]

        current_time  = int(time.time() * 1000)
        non_zero_time = current_time
        total_count   = 0
        while (0 < current_time and
               abs(current_time - non_zero_time) <= settings.dead_interval):
            request.end_absolute   = current_time
            request.start_absolute = max(0,
                                         current_time - settings.interval + 1)
            current_count = _count_from(self.read(request))
            logger.debug('%s [%d, %d]: %d points', metric_name,
                         request.start_absolute, request.end_absolute,
                         current_count)
            if current_count > 0:
                non_zero_time = current_time
            total_count  += current_count
            current_time -= settings.interval

        return total_count


class Client:
    '''
    Read-write client.  Reads go through self.reader, a ReadOnlyClient that
    shares this client's connection; hand self.reader to code that has no
    business modifying the database.
    '''
    def __init__(self, url=DEFAULT_URL, credentials=None,
                 timeout=DEFAULT_TIMEOUT, keep_alive=True, raise_errors=True,
                 transport=None):
        self.reader = ReadOnlyClient(url=url, credentials=credentials,
                                     timeout=timeout, keep_alive=keep_alive,
                                     raise_errors=raise_errors,
                                     transport=transport)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def close(self):
        self.reader.close()

    def get_metric_names(self, prefix=None):
        return self.reader.get_metric_names(prefix)

    def get_metric_tags(self, metric_name):
        return self.reader.get_metric_tags(metric_name)

    def read(self, request):
        return self.reader.read(request)

    def create_simple_request(self, metric_name, tags=None):
        return self.reader.create_simple_request(metric_name, tags)

    def read_count(self, request):
        return self.reader.read_count(request)

    def read_count_long(self, metric_name, tags, settings):
        return self.reader.read_count_long(metric_name, tags, settings)

    def delete_metric(self, metric_name):
        path = '/metric/%s' % quote(metric_name, safe='')
        self.reader._connection().delete_no_content(path)

    def write(self, items):
        if not items:
            raise InvalidArgumentException('Nothing to write.')
        self.reader._connection().post_no_content('/datapoints', items)

    def delete(self, request):
        '''
        Deletes every point matched by the request.
        '''
        _check_request(request)
        self.reader._connection().post_no_content('/datapoints/delete',
                                                  request)
