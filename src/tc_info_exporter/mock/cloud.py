"""
Mock Tencent Cloud account.

Serves a fake but plausible inventory through the same list calls and
response models the real SDK clients use, so the exporter can be
developed and tested without credentials. Offsets and limits behave
like the real API: the page is a slice of the full set and TotalCount
is always the size of the whole set.
"""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

from tencentcloud.cbs.v20170312 import models as cbs_models
from tencentcloud.es.v20180416 import models as es_models

ES_VERSIONS = ["6.8.2", "7.10.1", "7.14.2", "8.8.1"]
DISK_TYPES = ["CLOUD_BASIC", "CLOUD_PREMIUM", "CLOUD_SSD", "CLOUD_HSSD"]
ZONES = ["ap-beijing-3", "ap-beijing-5", "ap-beijing-6", "ap-beijing-7"]

# Same default page size the SDK APIs use when Limit is omitted
API_DEFAULT_LIMIT = 20


def _page(items: list, request) -> list:
    offset = request.Offset or 0
    limit = request.Limit if request.Limit is not None else API_DEFAULT_LIMIT
    return items[offset:offset + limit]


class MockCloud:
    """Stands in for both EsClient and CbsClient."""

    def __init__(self, seed: int = 42, clusters: int = 3, disks: int = 12,
                 errors: Optional[Dict[str, Exception]] = None):
        self._rng = random.Random(seed)
        self._clusters = [self._make_cluster(i) for i in range(clusters)]
        self._disks = [self._make_disk(i) for i in range(disks)]
        # action name -> exception raised instead of answering
        self.errors = dict(errors or {})
        # (action, offset, limit) for every call, in order
        self.requests: List[Tuple[str, Optional[int], Optional[int]]] = []

    def client_factory(self, credentials, region, profile) -> "MockCloud":
        """Use as a collector's client_factory; ignores the credentials."""
        return self

    @property
    def clusters(self) -> list:
        return list(self._clusters)

    @property
    def disks(self) -> list:
        return list(self._disks)

    def _make_cluster(self, i: int) -> es_models.InstanceInfo:
        cluster = es_models.InstanceInfo()
        cluster.InstanceId = f"es-{self._rng.getrandbits(32):08x}"
        cluster.InstanceName = f"search-{i}"
        cluster.EsVersion = self._rng.choice(ES_VERSIONS)
        cluster.Zone = self._rng.choice(ZONES)
        return cluster

    def _make_disk(self, i: int) -> cbs_models.Disk:
        placement = cbs_models.Placement()
        placement.Zone = self._rng.choice(ZONES)

        disk = cbs_models.Disk()
        disk.DiskId = f"disk-{self._rng.getrandbits(32):08x}"
        disk.DiskName = f"data-{i}"
        disk.DiskType = self._rng.choice(DISK_TYPES)
        # Sizes come in 10 GB steps from 20 GB up
        disk.DiskSize = 20 + 10 * self._rng.randint(0, 50)
        disk.DiskUsage = "SYSTEM_DISK" if i % 4 == 0 else "DATA_DISK"
        disk.DiskState = "ATTACHED"
        disk.Placement = placement
        return disk

    def _record(self, action: str, request):
        self.requests.append((action, request.Offset, request.Limit))
        error = self.errors.get(action)
        if error is not None:
            raise error

    def _request_id(self) -> str:
        return f"mock-{len(self.requests):06d}"

    def DescribeInstances(self, request) -> es_models.DescribeInstancesResponse:
        self._record("DescribeInstances", request)
        response = es_models.DescribeInstancesResponse()
        response.TotalCount = len(self._clusters)
        response.InstanceList = _page(self._clusters, request)
        response.RequestId = self._request_id()
        return response

    def DescribeDisks(self, request) -> cbs_models.DescribeDisksResponse:
        self._record("DescribeDisks", request)
        response = cbs_models.DescribeDisksResponse()
        response.TotalCount = len(self._disks)
        response.DiskSet = _page(self._disks, request)
        response.RequestId = self._request_id()
        return response
