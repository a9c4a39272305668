"""Registry of the available detectors, keyed by rule id."""
from typing import Dict, Iterable, List, Optional, Type

from .base import Detector
from .no_json_in_get_requests import JsonInGetRequestDetector
from .prefer_async_await import PreferAsyncAwaitDetector
from .require_encoded_query_params import EncodedQueryParamsDetector
from .require_error_handling import ErrorHandlingDetector
from .require_json_content_type import JsonContentTypeDetector
from .require_json_response_check import JsonResponseCheckDetector
from .require_status_check import StatusCheckDetector
from .require_timeout import TimeoutDetector

ALL_DETECTORS: List[Type[Detector]] = [
    ErrorHandlingDetector,
    StatusCheckDetector,
    JsonContentTypeDetector,
    JsonResponseCheckDetector,
    TimeoutDetector,
    PreferAsyncAwaitDetector,
    JsonInGetRequestDetector,
    EncodedQueryParamsDetector,
]

DETECTORS_BY_ID: Dict[str, Type[Detector]] = {cls.rule_id: cls for cls in ALL_DETECTORS}


def get_detector_classes(rule_ids: Optional[Iterable[str]] = None) -> List[Type[Detector]]:
    """Resolve rule ids to detector classes, in registry order.

    Args:
        rule_ids: Rule ids to enable; None enables every rule

    Returns:
        Detector classes to instantiate per unit

    Raises:
        ValueError: If a rule id is unknown
    """
    if rule_ids is None:
        return list(ALL_DETECTORS)

    wanted = set(rule_ids)
    unknown = wanted - set(DETECTORS_BY_ID)
    if unknown:
        raise ValueError(f"Unknown rule(s): {', '.join(sorted(unknown))}")
    return [cls for cls in ALL_DETECTORS if cls.rule_id in wanted]
