"""FastAPI dependency injection helpers.

Provides ``Depends()``-compatible callables for the configuration and
metrics stored on ``app.state`` by :func:`nock_multisig.api.app.create_app`.
"""

from __future__ import annotations

from fastapi import Request

from nock_multisig.config.settings import AppConfig, PolicyConfig
from nock_multisig.metrics.collector import MultisigMetrics


def get_config(request: Request) -> AppConfig:
    """Retrieve the application config from ``app.state``."""
    config: AppConfig = request.app.state.config
    return config


def get_policy(request: Request) -> PolicyConfig:
    """Retrieve the signing-policy section of the config."""
    return get_config(request).policy


def get_metrics(request: Request) -> MultisigMetrics:
    """Retrieve the metrics tracker from ``app.state``."""
    metrics: MultisigMetrics = request.app.state.metrics
    return metrics
