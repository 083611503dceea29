"""번역 모듈"""

from .gateway import TranslationGateway, TranslationMap, identity_map
from .merger import TranslationMerger
from .script import ScriptDetector, contains_cjk, detector_for

__all__ = [
    "TranslationGateway",
    "TranslationMap",
    "identity_map",
    "TranslationMerger",
    "ScriptDetector",
    "contains_cjk",
    "detector_for",
]
