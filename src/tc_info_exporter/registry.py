"""
Registry glue between the resource collectors and prometheus_client.

InventoryCollector is registered as a custom collector. On every scrape
it runs the enabled resource collectors one after another under a
single deadline and turns their results into gauge families, plus a few
self-health series per collector. A failed collector contributes no
inventory series; the others are unaffected.
"""

from __future__ import annotations

import logging
import platform
import time
from typing import Dict, Iterable, List, Sequence, Type

from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector
from prometheus_client.core import GaugeMetricFamily

from tc_info_exporter import NAMESPACE, __version__
from tc_info_exporter.collector.base import ResourceCollector
from tc_info_exporter.collector.cbs_collector import CbsCollector
from tc_info_exporter.collector.es_collector import EsCollector
from tc_info_exporter.metrics import CollectionResult, build_fqname

log = logging.getLogger(__name__)

DEFAULT_SCRAPE_TIMEOUT = 30.0

# Flag name -> collector class. Order here is the scrape order.
COLLECTORS: Dict[str, Type[ResourceCollector]] = {
    EsCollector.kind: EsCollector,
    CbsCollector.kind: CbsCollector,
}


def build_collectors(enabled: Iterable[str], credentials, **options) -> List[ResourceCollector]:
    """Instantiate only the enabled kinds, all sharing one set of credentials."""
    enabled = set(enabled)
    unknown = enabled - set(COLLECTORS)
    if unknown:
        raise ValueError(f"unknown collectors: {', '.join(sorted(unknown))}")
    return [cls(credentials, **options) for kind, cls in COLLECTORS.items() if kind in enabled]


class InventoryCollector:
    """Fans one scrape out to every enabled resource collector."""

    def __init__(self, collectors: Sequence[ResourceCollector],
                 scrape_timeout: float = DEFAULT_SCRAPE_TIMEOUT,
                 namespace: str = NAMESPACE):
        names = [c.describe().name for c in collectors]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate metric names: {', '.join(duplicates)}")

        self.collectors = list(collectors)
        self.scrape_timeout = scrape_timeout
        self._namespace = namespace

    def _health_families(self) -> Dict[str, GaugeMetricFamily]:
        ns = self._namespace
        return {
            "up": GaugeMetricFamily(
                build_fqname(ns, "collector", "up"),
                "1 if the collector's last scrape succeeded, 0 otherwise",
                labels=["collector"],
            ),
            "duration": GaugeMetricFamily(
                build_fqname(ns, "collector", "duration_seconds"),
                "Time the collector spent on the last scrape",
                labels=["collector"],
            ),
            "skipped": GaugeMetricFamily(
                build_fqname(ns, "collector", "skipped_items"),
                "Resource items skipped on the last scrape because a label field was missing",
                labels=["collector"],
            ),
            "pages": GaugeMetricFamily(
                build_fqname(ns, "collector", "page_requests"),
                "List API page requests issued on the last scrape",
                labels=["collector"],
            ),
            "error": GaugeMetricFamily(
                build_fqname(ns, "collector", "last_error"),
                "Set to 1 with the failure kind when the collector failed on the last scrape",
                labels=["collector", "kind"],
            ),
        }

    def describe(self):
        for collector in self.collectors:
            descriptor = collector.describe()
            yield GaugeMetricFamily(descriptor.name, descriptor.help_text,
                                    labels=list(descriptor.label_names))
        yield from self._health_families().values()

    def collect_results(self) -> List[CollectionResult]:
        """One pass over every collector. Never raises for a collector failure."""
        deadline = time.monotonic() + self.scrape_timeout
        results = []
        for collector in self.collectors:
            result = collector.collect(deadline=deadline)
            log.debug("%s: ok=%s samples=%d pages=%d in %.3fs", result.collector,
                      result.ok, len(result.samples), result.pages, result.duration_seconds)
            results.append(result)
        return results

    def collect(self):
        results = self.collect_results()
        health = self._health_families()

        for collector, result in zip(self.collectors, results):
            descriptor = collector.describe()
            family = GaugeMetricFamily(descriptor.name, descriptor.help_text,
                                       labels=list(descriptor.label_names))
            for sample in result.samples:
                family.add_metric(list(sample.label_values), sample.value)
            yield family

            health["up"].add_metric([result.collector], 1 if result.ok else 0)
            health["duration"].add_metric([result.collector], result.duration_seconds)
            health["skipped"].add_metric([result.collector], result.skipped)
            health["pages"].add_metric([result.collector], result.pages)
            if not result.ok:
                health["error"].add_metric([result.collector, result.error_kind], 1)

        yield from health.values()


class BuildInfoCollector:
    """Constant build_info series, like the version collector Go exporters register."""

    def __init__(self, namespace: str = NAMESPACE):
        self._name = build_fqname(namespace, "exporter", "build_info")

    def _family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            self._name,
            "A metric with a constant '1' value labeled by exporter and python version",
            labels=["version", "python_version"],
        )

    def describe(self):
        yield self._family()

    def collect(self):
        family = self._family()
        family.add_metric([__version__, platform.python_version()], 1)
        yield family


def build_registry(collectors: Sequence[ResourceCollector],
                   scrape_timeout: float = DEFAULT_SCRAPE_TIMEOUT,
                   process_metrics: bool = True) -> CollectorRegistry:
    """Fresh registry holding the inventory, build info and process collectors.

    Registration asks each collector to describe itself, so a metric name
    clash fails here, at startup.
    """
    registry = CollectorRegistry()
    registry.register(InventoryCollector(collectors, scrape_timeout=scrape_timeout))
    registry.register(BuildInfoCollector())
    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)
    return registry
