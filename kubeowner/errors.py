"""Error taxonomy for top-level controller resolution.

Every error raised by the resolvers and the ownership walker derives from
KubeOwnerError so callers can treat a failed lookup uniformly and retry on a
later reconciliation pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubeowner.models.keys import ControllerKeyWithAPIVersion


class KubeOwnerError(Exception):
    """Base class for all resolution failures."""


class NotFoundError(KubeOwnerError):
    """A well-known object is absent from its local cache."""


class ParseError(KubeOwnerError):
    """An apiVersion string could not be split into group and version."""


class UnsupportedKindError(KubeOwnerError):
    """A cached object is not of the kind its store was built for."""


class NoKindMatchError(KubeOwnerError):
    """Discovery knows no resource serving the requested group+kind."""

    def __init__(self, group: str, kind: str) -> None:
        super().__init__(f"no matches for kind {kind!r} in group {group!r}")
        self.group = group
        self.kind = kind


class ScaleUnavailableError(KubeOwnerError):
    """No candidate resource mapping produced a scale view.

    Missing scale support and insufficient permissions look the same here;
    ``last_error`` keeps the final underlying failure for diagnostics.
    """

    def __init__(self, key: ControllerKeyWithAPIVersion, last_error: Exception | None) -> None:
        super().__init__(
            f"unhandled targetRef {key.api_version} / {key.kind} / {key.name}, last error {last_error}"
        )
        self.key = key
        self.last_error = last_error


class CycleDetectedError(KubeOwnerError):
    """The ownership walk reached a key it had already visited."""

    def __init__(self, key: ControllerKeyWithAPIVersion) -> None:
        super().__init__(f"cycle detected in ownership chain at {key}")
        self.key = key


class AssertionMismatchError(KubeOwnerError, AssertionError):
    """A mock fetcher was called with a key other than the expected one."""

    def __init__(self, expected: ControllerKeyWithAPIVersion | None, actual: ControllerKeyWithAPIVersion | None) -> None:
        super().__init__(f"unexpected argument: {actual!r} (expected {expected!r})")
        self.expected = expected
        self.actual = actual
