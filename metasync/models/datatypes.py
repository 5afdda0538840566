"""Result records returned by the artifact store.

Key types:
- `CopyResult`: tagged outcome of one file copy.
"""

from __future__ import annotations

from dataclasses import dataclass

COPY_STATUS_OK = "ok"
COPY_STATUS_SKIPPED = "skipped"
COPY_STATUS_FAILED = "failed"
COPY_STATUSES = frozenset({COPY_STATUS_OK, COPY_STATUS_SKIPPED, COPY_STATUS_FAILED})


@dataclass(frozen=True, slots=True)
class CopyResult:
    """Outcome of copying one artifact.

    Attributes:
        status: One of `ok`, `skipped` (source vanished) or `failed`.
        file: Source path that was copied.
        status_message: Human-readable reason for `skipped`/`failed` outcomes.
    """

    status: str
    file: str
    status_message: str | None = None

    def __post_init__(self) -> None:
        if self.status not in COPY_STATUSES:
            raise ValueError(f"Unknown copy status `{self.status}`.")

    @property
    def ok(self) -> bool:
        return self.status == COPY_STATUS_OK

    def as_dict(self) -> dict[str, str]:
        """Return a JSON-friendly mapping, omitting an empty status message."""

        payload = {"status": self.status, "file": self.file}
        if self.status_message is not None:
            payload["statusMessage"] = self.status_message
        return payload
