"""
layered-settings - layered JSON configuration with provenance

Merges JSON-with-comments config files through ``extends`` chains and
records which file each setting came from.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("layered-settings")
__version_info__: tuple[int, int, int] = tuple(  # type: ignore[assignment]
    int(x) for x in _raw_version.split(".")[:3]
)
__version__: str = ".".join(str(x) for x in __version_info__)

from layered_settings.chain import find_config_chain  # noqa: E402
from layered_settings.config import Settings  # noqa: E402
from layered_settings.file_access import (  # noqa: E402
    FileReader,
    InMemoryFileReader,
    LocalFileReader,
)
from layered_settings.merging import (  # noqa: E402
    ChainEntry,
    ConfigMergerCore,
    MergerCallbacks,
    deep_equal,
    diff_arrays,
    diff_objects,
)
from layered_settings.remote import HttpUrlFetcher  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "ChainEntry",
    "ConfigMergerCore",
    "FileReader",
    "HttpUrlFetcher",
    "InMemoryFileReader",
    "LocalFileReader",
    "MergerCallbacks",
    "Settings",
    "deep_equal",
    "diff_arrays",
    "diff_objects",
    "find_config_chain",
]
