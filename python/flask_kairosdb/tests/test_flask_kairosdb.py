# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
import pytest
from flask import Flask

import kairosdb_client
from flask_kairosdb import KairosDB


def make_app(**config):
    app = Flask(__name__)
    app.config.update(config)
    return app


def test_defaults():
    app = make_app()
    KairosDB(app)
    assert app.config['KAIROSDB_URL'] == 'http://127.0.0.1:8080'
    assert app.config['KAIROSDB_READ_ONLY'] is False
    assert app.config['KAIROSDB_TIMEOUT'] == 30.0


def test_client_per_app_context():
    app = make_app(KAIROSDB_URL='http://kairos.test:8080',
                   KAIROSDB_USERNAME='user',
                   KAIROSDB_PASSWORD='pass',
                   KAIROSDB_TIMEOUT=5.0)
    ext = KairosDB()
    ext.init_app(app)

    with app.app_context():
        client = ext.client
        assert isinstance(client, kairosdb_client.Client)
        assert ext.client is client
        assert client.reader.url == 'http://kairos.test:8080'
        assert client.reader.credentials == ('user', 'pass')
        assert client.reader.timeout == 5.0
        client.reader._connection()

    assert client.reader.conn is None

    with app.app_context():
        assert ext.client is not client


def test_read_only_client():
    app = make_app(KAIROSDB_READ_ONLY=True)
    ext = KairosDB(app)
    with app.app_context():
        client = ext.client
        assert isinstance(client, kairosdb_client.ReadOnlyClient)
        assert client.credentials is None


def test_client_outside_app_context():
    ext = KairosDB(make_app())
    with pytest.raises(RuntimeError):
        ext.client
