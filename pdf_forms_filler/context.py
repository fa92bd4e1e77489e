"""Immutable state shared by one fill operation."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pypdf.generic import DictionaryObject

from .appearance import ResourceLedger
from .config import FillerConfig
from .models import FillReport
from .objects import ObjectStore, lookup


@dataclass(frozen=True)
class FillContext:
    store: ObjectStore
    values: Mapping[str, Any]
    form: DictionaryObject
    ledger: ResourceLedger
    config: FillerConfig
    report: FillReport

    @property
    def default_resources(self) -> Optional[DictionaryObject]:
        return lookup(self.form, "/DR")
