# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
import kairosdb_client
from flask import current_app, g


_no_kairosdb_msg = '''\
No KairosDB client is present.

This means that something has overwritten g.kairosdb_client.
'''


class KairosDB:
    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.config.setdefault('KAIROSDB_URL',
                              kairosdb_client.client.DEFAULT_URL)
        app.config.setdefault('KAIROSDB_USERNAME', None)
        app.config.setdefault('KAIROSDB_PASSWORD', None)
        app.config.setdefault('KAIROSDB_TIMEOUT',
                              kairosdb_client.client.DEFAULT_TIMEOUT)
        app.config.setdefault('KAIROSDB_READ_ONLY', False)
        app.teardown_appcontext(self.teardown)

    @staticmethod
    def connect():
        config = current_app.config
        credentials = None
        if config['KAIROSDB_USERNAME'] is not None:
            credentials = (config['KAIROSDB_USERNAME'],
                           config['KAIROSDB_PASSWORD'] or '')

        if config['KAIROSDB_READ_ONLY']:
            cls = kairosdb_client.ReadOnlyClient
        else:
            cls = kairosdb_client.Client
        return cls(url=config['KAIROSDB_URL'],
                   credentials=credentials,
                   timeout=config['KAIROSDB_TIMEOUT'])

    @staticmethod
    def teardown(_exc):
        client = g.pop('kairosdb_client', None)
        if client is not None:
            client.close()

    @property
    def client(self):
        if 'kairosdb_client' not in g:
            g.kairosdb_client = KairosDB.connect()

        if g.kairosdb_client is None:
            raise RuntimeError(_no_kairosdb_msg)

        return g.kairosdb_client
