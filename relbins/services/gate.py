from __future__ import annotations

from relbins.services.model import ArchiveArtifact

# Attributes every publish applies. A release relbins creates is a pre-release,
# and an upload replaces a same-named asset so republishing a tag is idempotent.
# An existing release keeps whatever state a human gave it.
RELEASE_PRERELEASE = True
RELEASE_OVERWRITE = True


def should_publish(is_publishable: bool, artifact: ArchiveArtifact | None) -> bool:
    """Whether the release sink is invoked for this job.

    Depends only on the trigger decision; a job without an artifact has nothing
    to publish.
    """
    return is_publishable and artifact is not None
