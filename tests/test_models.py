"""Tests for scan configuration and result models."""

from ipaddress import IPv4Address

import pytest

from originprobe.modules.errors import ConfigurationError, PatternError, ProbeError
from originprobe.modules.models import (
    DEFAULT_PORT,
    DEFAULT_STATUS_CODE,
    MatchRecord,
    ProbeOutcome,
    ScanReport,
    build_scan_config,
)


class TestBuildScanConfig:
    def test_defaults(self):
        config = build_scan_config("example.com")
        assert config.port == DEFAULT_PORT == 80
        assert config.status_code == DEFAULT_STATUS_CODE == 202
        assert config.method == "HEAD"
        assert config.scheme == "http"
        assert config.stop_on_find
        assert config.body is None
        assert not config.matcher.enabled
        assert config.body_limit == 0

    def test_https_and_method_normalized(self):
        config = build_scan_config("example.com", https=True, port=443, method=" get ")
        assert config.https
        assert config.method == "GET"
        assert config.body_limit == 64 * 1024

    def test_post_body_encoded(self):
        assert build_scan_config("a.com", method="POST", body="x=1").body == b"x=1"
        assert build_scan_config("a.com", method="POST").body == b""

    def test_body_ignored_for_non_post(self):
        assert build_scan_config("a.com", method="GET", body="x=1").body is None

    def test_headers_keep_order_and_duplicates(self):
        config = build_scan_config(
            "a.com", headers=[("X-A", "1"), ("Cookie", "a=1"), ("Cookie", "b=2")]
        )
        assert config.headers == (("X-A", "1"), ("Cookie", "a=1"), ("Cookie", "b=2"))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"domain": ""},
            {"domain": "bad domain"},
            {"method": "DELETE"},
            {"port": 0},
            {"port": 70000},
            {"status_code": 99},
            {"status_code": 600},
            {"workers": 0},
            {"timeout": 0},
        ],
    )
    def test_rejects_invalid_input(self, overrides):
        params = {"domain": "example.com"}
        params.update(overrides)
        domain = params.pop("domain")
        with pytest.raises(ConfigurationError):
            build_scan_config(domain, **params)

    def test_invalid_pattern(self):
        with pytest.raises(PatternError):
            build_scan_config("example.com", content_match="[a-")


class TestProbeOutcome:
    address = IPv4Address("10.0.0.1")

    def test_status_only_qualifies(self):
        assert ProbeOutcome(self.address, status=202, status_matched=True).qualifies

    def test_content_mismatch_disqualifies(self):
        outcome = ProbeOutcome(self.address, status=202, status_matched=True, content_matched=False)
        assert not outcome.qualifies

    def test_error_disqualifies(self):
        outcome = ProbeOutcome(self.address, error=ProbeError.TIMEOUT)
        assert not outcome.qualifies

    def test_wrong_status_disqualifies(self):
        assert not ProbeOutcome(self.address, status=200, content_matched=True).qualifies


def test_match_record_describe():
    outcome = ProbeOutcome(
        IPv4Address("10.0.0.9"), status=202, status_matched=True, content_matched=True
    )
    record = MatchRecord.from_outcome(outcome)
    assert record.describe() == "Status: 202, Content matched"
    assert MatchRecord(IPv4Address("10.0.0.9"), 202, False).describe() == "Status: 202"


def test_scan_report_found():
    assert not ScanReport().found
    assert ScanReport(matches=[MatchRecord(IPv4Address("10.0.0.1"), 202, False)]).found


class TestHeaderText:
    def test_non_ascii_header_rejected_with_raw_header(self):
        with pytest.raises(ConfigurationError) as excinfo:
            build_scan_config("example.com", headers=[("X-Tag", "café")])
        assert excinfo.value.value == "X-Tag: café"

    def test_non_ascii_header_name_rejected(self):
        with pytest.raises(ConfigurationError):
            build_scan_config("example.com", headers=[("Étiquette", "1")])

    def test_non_ascii_domain_rejected(self):
        with pytest.raises(ConfigurationError, match="punycode"):
            build_scan_config("café.example")

    def test_line_break_in_header_rejected(self):
        with pytest.raises(ConfigurationError):
            build_scan_config("example.com", headers=[("X-A", "1\r\nX-B: 2")])

    def test_non_ascii_user_agent_rejected(self):
        with pytest.raises(ConfigurationError):
            build_scan_config("example.com", user_agent="scanner™")
