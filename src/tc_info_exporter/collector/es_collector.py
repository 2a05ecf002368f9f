"""
Collector for Elasticsearch Service clusters. One gauge per cluster,
labelled with its id, display name and Elasticsearch version.
"""

from __future__ import annotations

from typing import Any, List

from tencentcloud.es.v20180416 import es_client, models

from tc_info_exporter import NAMESPACE
from tc_info_exporter.collector.base import ClientFactory, ResourceCollector
from tc_info_exporter.metrics import Descriptor, build_fqname


class EsCollector(ResourceCollector):

    kind = "es"
    descriptor = Descriptor(
        name=build_fqname(NAMESPACE, "es", "instance"),
        help_text="elastic instance on tencent cloud",
        label_names=("instance_id", "name", "es_version"),
    )
    field_paths = {
        "instance_id": "InstanceId",
        "name": "InstanceName",
        "es_version": "EsVersion",
    }

    def default_client_factory(self) -> ClientFactory:
        return es_client.EsClient

    def build_request(self, offset: int, limit: int) -> models.DescribeInstancesRequest:
        request = models.DescribeInstancesRequest()
        request.Offset = offset
        request.Limit = limit
        return request

    def call(self, client: Any, request: Any) -> Any:
        return client.DescribeInstances(request)

    def page_items(self, response: Any) -> List[Any]:
        return response.InstanceList
