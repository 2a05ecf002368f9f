"""Basic sanity checks for the mock cloud account."""

from tencentcloud.cbs.v20170312 import models as cbs_models

from tc_info_exporter.collector.cbs_collector import CbsCollector
from tc_info_exporter.collector.es_collector import EsCollector
from tc_info_exporter.credentials import mock_credentials
from tc_info_exporter.mock.cloud import MockCloud


def test_pages_are_slices_with_full_total():
    cloud = MockCloud(seed=42, disks=30)
    request = cbs_models.DescribeDisksRequest()
    request.Offset = 20
    request.Limit = 20

    response = cloud.DescribeDisks(request)
    assert response.TotalCount == 30
    assert len(response.DiskSet) == 10
    assert cloud.requests == [("DescribeDisks", 20, 20)]


def test_deterministic_with_same_seed():
    a = MockCloud(seed=99)
    b = MockCloud(seed=99)

    assert [d.DiskId for d in a.disks] == [d.DiskId for d in b.disks]
    assert [c.EsVersion for c in a.clusters] == [c.EsVersion for c in b.clusters]


def test_collectors_read_the_whole_mock_inventory():
    cloud = MockCloud(seed=7, clusters=4, disks=23)

    es = EsCollector(mock_credentials(), client_factory=cloud.client_factory).collect()
    cbs = CbsCollector(mock_credentials(), page_size=10,
                       client_factory=cloud.client_factory).collect()

    assert len(es.samples) == 4
    assert len(cbs.samples) == 23
    assert cbs.pages == 3
    assert [r for r in cloud.requests if r[0] == "DescribeDisks"] == [
        ("DescribeDisks", 0, 10), ("DescribeDisks", 10, 10), ("DescribeDisks", 20, 10),
    ]
    for sample in cbs.samples:
        assert sample.labels()["zone"].startswith("ap-beijing-")
        assert int(sample.labels()["disk_size"]) >= 20
