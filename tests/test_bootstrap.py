"""Tests for dependency assembly."""

from __future__ import annotations

import pytest
from kubernetes import client, config

from driftguard import bootstrap as bootstrap_module
from driftguard.adapters import KubernetesApiAdapter
from driftguard.bootstrap import (
    bootstrap_create_kubernetes_adapter,
    bootstrap_create_status_committer,
    bootstrap_create_status_store,
    bootstrap_load_kubernetes_configuration,
)
from driftguard.config import AppSettings, SettingsLoadError
from driftguard.db import SQLAlchemyApplicationStatusService
from driftguard.deployer import StatusCommitter


def test_bootstrap_status_store_follows_backend_setting(tmp_path) -> None:
    """Select the adapter or the SQL store from `status_store_backend`.

    Returns:
        None: Assertions validate wiring.

    Raises:
        AssertionError: Raised when the wrong store is selected.
    """

    kubernetes_settings = AppSettings()
    database_settings = AppSettings(
        status_store_backend="database",
        database_url=f"sqlite:///{tmp_path / 'status.db'}",
    )
    adapter = bootstrap_create_kubernetes_adapter(kubernetes_settings, client_configuration=client.Configuration())

    assert isinstance(adapter, KubernetesApiAdapter)
    assert bootstrap_create_status_store(kubernetes_settings, adapter) is adapter
    database_store = bootstrap_create_status_store(database_settings, adapter)
    assert isinstance(database_store, SQLAlchemyApplicationStatusService)
    assert isinstance(bootstrap_create_status_committer(database_store), StatusCommitter)


def test_bootstrap_auto_mode_falls_back_to_kubeconfig(monkeypatch: pytest.MonkeyPatch) -> None:
    """Use kubeconfig when in-cluster credentials are not mounted.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate loader calls.

    Raises:
        AssertionError: Raised when the fallback is skipped.
    """

    loader_calls: list[str] = []

    def _fake_load_incluster_config(client_configuration) -> None:
        _ = client_configuration
        loader_calls.append("in_cluster")
        raise config.ConfigException("Service host/port is not set.")

    def _fake_load_kube_config(config_file, context, client_configuration) -> None:
        loader_calls.append(f"kubeconfig:{config_file}:{context}")
        client_configuration.host = "https://cluster.example.test:6443"

    monkeypatch.setattr(bootstrap_module.config, "load_incluster_config", _fake_load_incluster_config)
    monkeypatch.setattr(bootstrap_module.config, "load_kube_config", _fake_load_kube_config)

    client_configuration = bootstrap_load_kubernetes_configuration(
        AppSettings(kubeconfig_path="/tmp/kubeconfig", kubeconfig_context="staging")
    )

    assert loader_calls == ["in_cluster", "kubeconfig:/tmp/kubeconfig:staging"]
    assert client_configuration.host == "https://cluster.example.test:6443"


def test_bootstrap_in_cluster_mode_without_credentials_raises_settings_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fail startup instead of sending unauthenticated requests.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate raised error.

    Raises:
        AssertionError: Raised when missing credentials are ignored.
    """

    def _fake_load_incluster_config(client_configuration) -> None:
        _ = client_configuration
        raise config.ConfigException("Service token file does not exist.")

    def _unexpected_load_kube_config(**kwargs) -> None:
        raise AssertionError(f"kubeconfig must not be read in in_cluster mode: {kwargs}")

    monkeypatch.setattr(bootstrap_module.config, "load_incluster_config", _fake_load_incluster_config)
    monkeypatch.setattr(bootstrap_module.config, "load_kube_config", _unexpected_load_kube_config)

    with pytest.raises(SettingsLoadError, match="mode=in_cluster"):
        bootstrap_load_kubernetes_configuration(AppSettings(kubernetes_config_mode="in_cluster"))
