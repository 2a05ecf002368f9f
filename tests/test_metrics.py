"""Tests for descriptors, samples and collection results."""

import pytest

from tc_info_exporter.metrics import CollectionResult, Descriptor, build_fqname


DESC = Descriptor(name="tc_info_x_instance", help_text="x", label_names=("id", "name"))


def test_build_fqname_skips_empty_parts():
    assert build_fqname("tc_info", "es", "instance") == "tc_info_es_instance"
    assert build_fqname("tc_info", "", "up") == "tc_info_up"


def test_sample_keeps_label_order():
    sample = DESC.sample(["ins-1", "first"])
    assert sample.value == 1.0
    assert sample.label_values == ("ins-1", "first")
    assert sample.labels() == {"id": "ins-1", "name": "first"}


def test_sample_rejects_wrong_label_count():
    with pytest.raises(ValueError):
        DESC.sample(["ins-1"])
    with pytest.raises(ValueError):
        DESC.sample(["ins-1", "first", "extra"])


def test_failed_result_drops_samples():
    result = CollectionResult(collector="x", samples=[DESC.sample(["a", "b"])])
    assert result.ok

    result.fail("api", RuntimeError("rate limited"))
    assert not result.ok
    assert result.samples == []
    assert result.error_kind == "api"
    assert result.summary()["error"] == "rate limited"
