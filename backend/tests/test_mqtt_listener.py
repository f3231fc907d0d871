"""Tests for broker URL handling."""

import pytest

from transit_tracker.core.mqtt_listener import parse_broker_url


@pytest.mark.parametrize("url, expected", [
    ("mqtt://test.mosquitto.org:1883", ("test.mosquitto.org", 1883, False)),
    ("mqtt://broker.local", ("broker.local", 1883, False)),
    ("mqtts://broker.local", ("broker.local", 8883, True)),
    ("ssl://broker.local:9999", ("broker.local", 9999, True)),
    ("tcp://10.0.0.5:1884", ("10.0.0.5", 1884, False)),
    ("broker.local:2000", ("broker.local", 2000, False)),
])
def test_parse_broker_url(url, expected):
    assert parse_broker_url(url) == expected


@pytest.mark.parametrize("url", ["", "   ", "mqtt://:1883"])
def test_parse_broker_url_invalid(url):
    with pytest.raises(ValueError):
        parse_broker_url(url)
