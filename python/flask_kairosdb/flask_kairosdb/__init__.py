# Copyright (c) 2025 by Terry Greeniaus.
# All rights reserved.
from .flask_kairosdb import KairosDB


__all__ = [
    'KairosDB',
]
