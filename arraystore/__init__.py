# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._errors import (
    CallbackError,
    KeyExtractionError,
    ProcessorError,
    StoreError,
)
from .config import StoreSettings, configure_logging, settings
from .sectioned_list import Section, SectionedList, partition
from .store import DataStore, DeletedRecord, is_placeholder
from .version import __version__

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = (
    "CallbackError",
    "DataStore",
    "DeletedRecord",
    "KeyExtractionError",
    "ProcessorError",
    "Section",
    "SectionedList",
    "StoreError",
    "StoreSettings",
    "__version__",
    "configure_logging",
    "is_placeholder",
    "partition",
    "settings",
)
