"""
Base resource collector.

A resource collector turns one Tencent Cloud list API into inventory
gauges. Subclasses only say how to build the client and the page
request, where the items live in a response, and which item field feeds
which label. Pagination, field checks and failure handling live here so
every resource kind behaves the same way when the API misbehaves.
"""

from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from tencentcloud.common.credential import Credential
from tencentcloud.common.exception.tencent_cloud_sdk_exception import TencentCloudSDKException
from tencentcloud.common.profile.client_profile import ClientProfile
from tencentcloud.common.profile.http_profile import HttpProfile

from tc_info_exporter.errors import ScrapeTimeout
from tc_info_exporter.metrics import CollectionResult, Descriptor, Sample

log = logging.getLogger(__name__)

DEFAULT_REGION = "ap-beijing"
DEFAULT_PAGE_SIZE = 100
DEFAULT_REQUEST_TIMEOUT = 10

# (credentials, region, profile) -> SDK client. Overridden for --mock and tests.
ClientFactory = Callable[[Credential, str, ClientProfile], Any]


def is_api_error(exc: BaseException) -> bool:
    """True for errors returned by the cloud API itself.

    The SDK raises TencentCloudSDKException for client-side failures too
    (network errors, bad responses), but only errors that came back from
    the API carry a request id.
    """
    return isinstance(exc, TencentCloudSDKException) and bool(exc.get_request_id())


def extract_field(item: Any, path: str) -> Any:
    """Follow a dotted path through SDK models or dicts. None if any step is missing."""
    value = item
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


@dataclass
class PassStats:
    """Counters for a single collection pass. Never shared between passes."""

    pages: int = 0
    fetched: int = 0
    skipped: int = 0


class ResourceCollector(ABC):
    """Interface for all resource kinds."""

    # Short name used in flags, logs and the collector label
    kind: str = ""
    descriptor: Descriptor
    # label name -> dotted field path on a response item
    field_paths: Dict[str, str] = {}

    def __init__(
        self,
        credentials: Credential,
        region: str = DEFAULT_REGION,
        page_size: int = DEFAULT_PAGE_SIZE,
        request_timeout: int = DEFAULT_REQUEST_TIMEOUT,
        client_factory: Optional[ClientFactory] = None,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        missing = [name for name in self.descriptor.label_names if name not in self.field_paths]
        if missing:
            raise TypeError(f"{type(self).__name__} has no field path for labels {missing}")

        self._credentials = credentials
        self.region = region
        self.page_size = page_size
        self.request_timeout = request_timeout
        self._client_factory = client_factory

    @abstractmethod
    def default_client_factory(self) -> ClientFactory:
        """The SDK client class for this resource kind."""
        ...

    @abstractmethod
    def build_request(self, offset: int, limit: int) -> Any:
        """Build the list request for one page."""
        ...

    @abstractmethod
    def call(self, client: Any, request: Any) -> Any:
        """Issue one list request and return the SDK response."""
        ...

    @abstractmethod
    def page_items(self, response: Any) -> List[Any]:
        """Items carried by one page of the response."""
        ...

    def total_count(self, response: Any) -> int:
        return int(getattr(response, "TotalCount", None) or 0)

    def format_label(self, label: str, raw: Any) -> str:
        return str(raw)

    def describe(self) -> Descriptor:
        return self.descriptor

    def name(self) -> str:
        return f"{self.kind} ({self.region})"

    def new_client(self, deadline: Optional[float] = None) -> Any:
        """SDK client for one pass. A deadline caps the per-request timeout
        at the whole seconds left, never below one.
        """
        timeout = self.request_timeout
        if deadline is not None:
            remaining = math.ceil(deadline - time.monotonic())
            timeout = max(1, min(timeout, remaining))
        profile = ClientProfile(httpProfile=HttpProfile(reqTimeout=timeout))
        factory = self._client_factory or self.default_client_factory()
        return factory(self._credentials, self.region, profile)

    def label_values(self, item: Any) -> Optional[List[str]]:
        """Label values in descriptor order, or None if a field is absent or unusable."""
        values = []
        for label in self.descriptor.label_names:
            raw = extract_field(item, self.field_paths[label])
            if raw is None:
                log.debug("%s: item missing %s (%s), skipping",
                          self.kind, label, self.field_paths[label])
                return None
            try:
                values.append(self.format_label(label, raw))
            except (TypeError, ValueError):
                log.debug("%s: bad %s value %r, skipping", self.kind, label, raw)
                return None
        return values

    def samples(self, deadline: Optional[float] = None,
                stats: Optional[PassStats] = None) -> Iterator[Sample]:
        """Fetch every page and yield one sample per usable item.

        The total reported by the first page fixes how many pages may be
        requested; later pages cannot extend it. A page with no items ends
        the pass early. `deadline` is a time.monotonic() value checked
        before each request, and the SDK request timeout is capped at the
        whole seconds left when the pass starts.
        """
        stats = stats if stats is not None else PassStats()
        client = self.new_client(deadline)

        offset = 0
        total = 0
        max_pages = 1

        while stats.pages < max_pages:
            if deadline is not None and time.monotonic() >= deadline:
                raise ScrapeTimeout(
                    f"scrape deadline passed after {stats.pages} page request(s)"
                )

            response = self.call(client, self.build_request(offset, self.page_size))
            stats.pages += 1

            if stats.pages == 1:
                total = self.total_count(response)
                max_pages = math.ceil(total / self.page_size)

            items = self.page_items(response) or []
            for item in items:
                values = self.label_values(item)
                if values is None:
                    stats.skipped += 1
                    continue
                yield self.descriptor.sample(values)

            stats.fetched += len(items)
            if not items or stats.fetched >= total:
                break
            offset += self.page_size

        log.debug("%s: %d item(s) over %d page(s), total reported %d",
                  self.kind, stats.fetched, stats.pages, total)

    def collect(self, deadline: Optional[float] = None) -> CollectionResult:
        """Run one full pass. Failures end up in the result, never raised.

        Samples are buffered, so a failure on a later page discards the
        earlier pages and the collector reports nothing for this scrape.
        """
        result = CollectionResult(collector=self.kind)
        stats = PassStats()
        started = time.monotonic()

        try:
            result.samples = list(self.samples(deadline, stats))
        except ScrapeTimeout as e:
            log.warning("%s: collection timed out: %s", self.kind, e)
            result.fail("timeout", e)
        except TencentCloudSDKException as e:
            if is_api_error(e):
                log.warning("%s: API error %s: %s (request id %s)",
                            self.kind, e.get_code(), e.get_message(), e.get_request_id())
                result.fail("api", e)
            else:
                log.error("%s: SDK client error %s: %s", self.kind, e.get_code(), e.get_message())
                result.fail("unexpected", e)
        except Exception as e:
            log.exception("%s: collection failed", self.kind)
            result.fail("unexpected", e)
        finally:
            result.pages = stats.pages
            result.skipped = stats.skipped
            result.duration_seconds = time.monotonic() - started

        if result.skipped:
            log.info("%s: skipped %d item(s) with missing fields", self.kind, result.skipped)
        return result
