"""Shared fixtures for the opnconf test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from loguru import logger

from opnconf.store.config_store import ConfigStore

# ── sample configuration documents ────────────────────────────────────

# empty elements, quoting and entities spelled the way OPNsense writes them
SAMPLE_CONFIG = """<?xml version="1.0"?>
<opnsense>
  <version>24.7</version>
  <system>
    <hostname>fw01</hostname>
    <!-- managed by ansible -->
    <domain>example.lan</domain>
    <timezone>Europe/Berlin</timezone>
    <webgui protocol='https' port='443'/>
    <motd>Authorised use only &amp; &quot;monitored&quot;</motd>
  </system>
  <interfaces>
    <wan>
      <if>igb0</if>
      <descr></descr>
      <enable>1</enable>
      <blockpriv/>
      <ipaddr>dhcp</ipaddr>
    </wan>
    <lan>
      <if>igb1</if>
      <descr>LAN</descr>
      <enable>1</enable>
      <ipaddr>192.168.1.1</ipaddr>
      <subnet>24</subnet>
    </lan>
  </interfaces>
  <vlans>
    <vlan>
      <if>igb1</if>
      <tag>10</tag>
      <descr>VLAN_10</descr>
    </vlan>
  </vlans>
  <filter>
    <rule>
      <ruleid>abc-100</ruleid>
      <type>pass</type>
      <interface>lan</interface>
      <ipprotocol>inet</ipprotocol>
      <statetype>keep state</statetype>
      <descr>Default allow LAN to any rule</descr>
      <source>
        <network>lan</network>
      </source>
      <destination>
        <any/>
      </destination>
    </rule>
    <rule uuid="6f1c2f8e-3f0b-4b8e-9a51-0c8f2b7d9e10">
      <type>block</type>
      <interface>wan</interface>
      <descr>Block bogons</descr>
    </rule>
  </filter>
  <nat>
    <outbound>
      <mode>automatic</mode>
    </outbound>
    <enable/>
  </nat>
</opnsense>
"""


@pytest.fixture()
def sample_config_text():
    return SAMPLE_CONFIG


@pytest.fixture()
def config_file(tmp_path):
    """Sample config.xml written to a temp directory."""
    path = tmp_path / "config.xml"
    path.write_text(SAMPLE_CONFIG)
    return path


@pytest.fixture()
def make_config(tmp_path):
    """Factory fixture writing arbitrary XML to ``config.xml``."""

    def _make(text: str, name: str = "config.xml"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return _make


@pytest.fixture()
def config_store(config_file, tmp_path):
    """ConfigStore on the sample config with snapshots in a separate directory."""
    return ConfigStore(config_file, backup_dir=tmp_path / "backups")


@pytest.fixture()
def mock_reloader():
    """MagicMock standing in for Reloader."""
    reloader = MagicMock()
    reloader.reload.return_value = None
    return reloader


@pytest.fixture(autouse=True)
def _reset_loguru():
    """Drop sinks bound to captured streams between tests."""
    yield
    logger.remove()
    logger.disable("opnconf")
