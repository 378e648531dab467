"""PolicyRun aggregate representing one discover/render/apply pass."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fms_secpolicy.domain.entities.rendered_policy import RenderedPolicy
from fms_secpolicy.domain.entities.resource import Resource


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PolicyRun:
    """
    Aggregate root representing the result of a policy run.
    This is the main entity returned by the policy service.
    """

    dry_run: bool = False

    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    resources: list[Resource] = field(default_factory=list)
    policies: dict[str, RenderedPolicy] = field(default_factory=dict)
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)

    # Set when the run stopped early (e.g. account outside the target OU)
    skipped_reason: str | None = None
    output_location: str | None = None

    def record_upsert(self, policy_name: str, action: str) -> None:
        """Record a created or updated policy."""
        if action == "created":
            self.created.append(policy_name)
        else:
            self.updated.append(policy_name)

    def skip(self, reason: str) -> None:
        """Mark the run as skipped."""
        self.skipped_reason = reason
        self.complete()

    def complete(self) -> None:
        """Mark run as completed."""
        self.completed_at = _utcnow()

    @property
    def was_skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def policy_names(self) -> list[str]:
        return sorted(self.policies)

    def summary(self) -> str:
        """One-line status message for callers."""
        if self.skipped_reason:
            return self.skipped_reason
        if not self.resources:
            return "no resources"
        return f"processed {len(self.policies)} resource(s)"

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "dry_run": self.dry_run,
            "message": self.summary(),
            "resources": len(self.resources),
            "policies": self.policy_names,
            "created": list(self.created),
            "updated": list(self.updated),
            "output_location": self.output_location,
        }

    def __str__(self) -> str:
        return (
            f"PolicyRun(resources={len(self.resources)}, "
            f"policies={len(self.policies)}, dry_run={self.dry_run})"
        )
