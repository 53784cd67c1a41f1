"""Assign an ErrorClass to a completed trace chain.

Rules are applied top-down and the first match wins:

1. concurrency        - the chain carries a duplicate-event anomaly
2. dependency-failure - terminal evidence is a non-2xx external response
3. configuration      - terminal evidence is a configuration/environment read
4. data-integrity     - terminal evidence shows a type or shape mismatch
5. crash              - everything else

The classification is deterministic and never fails.
"""

from rootcause.config import (
    CONFIG_ACCESS_PATTERN,
    CONFIG_TAG_PATTERN,
    SCHEMA_MESSAGE_PATTERN,
    SCHEMA_TAG_PATTERN,
    SHAPE_MISMATCH_PATTERN,
)
from rootcause.context.models import BreadcrumbCategory, ErrorClass, TraceChain
from rootcause.trace.tracer import is_config_read


def _is_dependency_failure(chain: TraceChain) -> bool:
    crumb = chain.terminal.evidence.breadcrumb
    return crumb is not None and crumb.category is BreadcrumbCategory.HTTP and crumb.is_error_response


def _is_configuration(chain: TraceChain) -> bool:
    evidence = chain.terminal.evidence
    if evidence.breadcrumb is not None:
        if is_config_read(evidence.breadcrumb):
            return True
    elif CONFIG_ACCESS_PATTERN.search(evidence.text):
        return True
    # Never left the crash site: fall back to what the tags say was read
    if len(chain) == 1:
        return any(CONFIG_TAG_PATTERN.search(key) for key in chain.tags)
    return False


def _schema_shapes(tags: dict[str, str]) -> set[str]:
    return {value.strip() for key, value in tags.items() if SCHEMA_TAG_PATTERN.search(key) and value.strip()}


def _is_data_integrity(chain: TraceChain) -> bool:
    if SHAPE_MISMATCH_PATTERN.search(chain.terminal.evidence.text):
        return True
    if SCHEMA_MESSAGE_PATTERN.search(chain.error_message):
        return True
    return len(_schema_shapes(chain.tags)) > 1


def classify(chain: TraceChain) -> ErrorClass:
    """Bucket a trace chain into one of the five error classes."""
    # 1) Double submissions and other duplicate writes
    if chain.anomalies:
        return ErrorClass.CONCURRENCY

    # 2) External dependency answered with an error
    if _is_dependency_failure(chain):
        return ErrorClass.DEPENDENCY_FAILURE

    # 3) Missing or wrong configuration
    if _is_configuration(chain):
        return ErrorClass.CONFIGURATION

    # 4) Producer and consumer disagree on shape
    if _is_data_integrity(chain):
        return ErrorClass.DATA_INTEGRITY

    # 5) Immediate fault with no traceable external cause
    return ErrorClass.CRASH
