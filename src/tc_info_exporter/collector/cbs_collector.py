"""
Collector for Cloud Block Storage disks. One gauge per disk; the zone
comes from the nested Placement model.
"""

from __future__ import annotations

from typing import Any, List

from tencentcloud.cbs.v20170312 import cbs_client, models

from tc_info_exporter import NAMESPACE
from tc_info_exporter.collector.base import ClientFactory, ResourceCollector
from tc_info_exporter.metrics import Descriptor, build_fqname


class CbsCollector(ResourceCollector):

    kind = "cbs"
    descriptor = Descriptor(
        name=build_fqname(NAMESPACE, "cbs", "instance"),
        help_text="block storage disk on tencent cloud",
        label_names=("disk_id", "disk_name", "disk_type", "disk_size", "zone"),
    )
    field_paths = {
        "disk_id": "DiskId",
        "disk_name": "DiskName",
        "disk_type": "DiskType",
        "disk_size": "DiskSize",  # GB
        "zone": "Placement.Zone",
    }

    def default_client_factory(self) -> ClientFactory:
        return cbs_client.CbsClient

    def build_request(self, offset: int, limit: int) -> models.DescribeDisksRequest:
        request = models.DescribeDisksRequest()
        request.Offset = offset
        request.Limit = limit
        return request

    def call(self, client: Any, request: Any) -> Any:
        return client.DescribeDisks(request)

    def page_items(self, response: Any) -> List[Any]:
        return response.DiskSet

    def format_label(self, label: str, raw: Any) -> str:
        if label == "disk_size":
            return str(int(raw))
        return str(raw)
