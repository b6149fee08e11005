# Copyright (c) 2020 by Phase Advanced Sensor Systems, Inc.
# All rights reserved.
import logging
import threading
import time

from .models import Incoming


logger = logging.getLogger(__name__)


class PushQueue:
    '''
    Class to asynchronously push data points to a KairosDB server.  Pushing
    points can take a nondeterministic length of time and by trying to push
    them synchronously you can introduce lots of jitter into your measurement
    loop.  This asynchronous queue allows the work to be performed in a
    separate thread so as not to disturb the measurement times.

    Points are grouped per series (metric name plus tags) and everything
    queued since the last push goes out in a single write.  A failed write is
    logged and reported through error_cb(incomings, exception); its points
    are dropped.  incomings is None when the points could not be turned
    into Incoming records at all, e.g. because of a negative timestamp.
    '''
    def __init__(self, client, push_cb=None, error_cb=None, throttle_secs=0):
        self.client   = client
        self.push_cb  = push_cb
        self.error_cb = error_cb

        self.queue_cond    = threading.Condition()
        self.queue         = {}
        self.cookie_queue  = {}
        self.pushing       = False
        self.thread        = None
        self.running       = False
        self.throttle_secs = throttle_secs
        self.start()

    @staticmethod
    def _key(name, tags):
        return (name, tuple(sorted(tags.items())))

    def start(self):
        assert not self.thread
        self.running = True
        self.thread  = threading.Thread(target=self._push_loop, daemon=True)
        self.thread.start()

    def append(self, name, tags, item, cookie=None):
        '''
        Append a single [timestamp, value] point to the push queue.
        '''
        self.append_list(name, tags, [item], [cookie])

    def append_list(self, name, tags, items, cookies=None):
        '''
        Append a list of points for the same series to the push queue.
        '''
        if cookies is None:
            cookies = [None] * len(items)
        key = self._key(name, tags)
        with self.queue_cond:
            if key not in self.queue:
                self.queue[key] = list(items)
                self.cookie_queue[key] = list(cookies)
            else:
                self.queue[key] += items
                self.cookie_queue[key] += cookies
            self.queue_cond.notify_all()

    def flush(self):
        '''
        Block until every point queued so far has been handed to the server.
        '''
        with self.queue_cond:
            while self.queue or self.pushing:
                self.queue_cond.wait()

    def stop(self):
        '''
        Push whatever is still queued and stop the push thread.
        '''
        with self.queue_cond:
            self.running = False
            self.queue_cond.notify_all()
        self.thread.join()
        self.thread = None

    def _push(self, queue, cookies):
        incomings = None
        try:
            incomings = [Incoming(name=name, tags=dict(tags),
                                  datapoints=points)
                         for (name, tags), points in queue.items()]
            self.client.write(incomings)
        except Exception as e:
            logger.exception('KairosDB push of %u series failed.', len(queue))
            if self.error_cb:
                self.error_cb(incomings, e)
            return

        if self.push_cb:
            for (name, tags), points in queue.items():
                for p, c in zip(points, cookies[(name, tags)]):
                    self.push_cb(name, dict(tags), p, c)

    def _push_loop(self):
        while True:
            time.sleep(self.throttle_secs)

            with self.queue_cond:
                while not self.queue and self.running:
                    self.queue_cond.wait()
                if not self.queue:
                    return

                queue             = self.queue
                cookies           = self.cookie_queue
                self.queue        = {}
                self.cookie_queue = {}
                self.pushing      = True

            try:
                self._push(queue, cookies)
            except Exception:
                logger.exception('KairosDB push callback failed.')
            finally:
                with self.queue_cond:
                    self.pushing = False
                    self.queue_cond.notify_all()
