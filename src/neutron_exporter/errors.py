"""
Exception types. Two classes of failure matter at scrape time:
CollectorError (one metric family goes missing for one scrape) and
everything else (a bug, allowed to propagate).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


class ExporterError(Exception):
    pass


class RegistryError(ExporterError):
    """Bad metric schema at startup. The exporter should not start."""


class MetricNotRegistered(ExporterError, LookupError):
    """A collector emitted a metric the catalog never declared."""

    def __init__(self, name: str):
        super().__init__(f"metric {name!r} is not registered")
        self.name = name


class CollectorError(ExporterError):
    """Aborts the current collector's pass. Other collectors keep going."""

    collector: str = ""


class FetchError(CollectorError):

    def __init__(self, kind: str, cause: BaseException | str):
        super().__init__(f"listing {kind} failed: {cause}")
        self.kind = kind
        self.cause = cause


class ExtractError(FetchError):
    """The page came back but its payload could not be read."""


class NumericParseError(CollectorError):

    def __init__(self, field_name: str, raw: object):
        super().__init__(f"cannot parse {field_name}={raw!r} as a number")
        self.field_name = field_name
        self.raw = raw


class IdentifierGenerationError(CollectorError):
    pass


@dataclass
class ScrapeErrors:
    """Failures from one scrape, one slot per failed collector."""

    failures: List[Tuple[str, CollectorError]] = field(default_factory=list)

    def add(self, collector: str, error: CollectorError):
        self.failures.append((collector, error))

    @property
    def failed_collectors(self) -> List[str]:
        return [name for name, _ in self.failures]

    def __bool__(self) -> bool:
        return bool(self.failures)

    def __len__(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        if not self.failures:
            return "all collectors succeeded"
        return "; ".join(f"{name}: {err}" for name, err in self.failures)
