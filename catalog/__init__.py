from .client import ChubClient, CardDownloadError
from .proxy import ScrapeProxyClient, ScrapeProxyError
from .models import QuerySpec, CharacterRecord, Tag, RawItem, Ok, Degraded, Outcome
from .normalizer import RecordNormalizer
from .providers import ProviderAdapter, PrimaryCatalog, SecondaryCatalog, PROVIDERS, get_provider
from .importer import HostImporter, ImportedFile, ImportFailed

__all__ = [
    "ChubClient",
    "CardDownloadError",
    "ScrapeProxyClient",
    "ScrapeProxyError",
    "QuerySpec",
    "CharacterRecord",
    "Tag",
    "RawItem",
    "Ok",
    "Degraded",
    "Outcome",
    "RecordNormalizer",
    "ProviderAdapter",
    "PrimaryCatalog",
    "SecondaryCatalog",
    "PROVIDERS",
    "get_provider",
    "HostImporter",
    "ImportedFile",
    "ImportFailed",
]
