"""Staging Builder.

A staging tree is built privately under the namespace root as
``.stage.<holder-id>/<name>/<name>/<holder-id>`` so that a single rename of
``.stage.<holder-id>/<name>`` installs a complete lock group in one step.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from semlock.core.constants import STAGING_PREFIX
from semlock.core.exceptions import StagingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagingTree:
    """Paths of one attempt's private staging tree."""

    lock_name: str
    holder_id: str
    root: Path

    @property
    def outer(self) -> Path:
        """Node renamed onto the lock group position when publishing."""
        return self.root / self.lock_name

    @property
    def holder(self) -> Path:
        return self.outer / self.lock_name / self.holder_id


def staging_root_for(namespace: Path, holder_id: str) -> Path:
    return namespace / f"{STAGING_PREFIX}{holder_id}"


class StagingBuilder:
    """Builds process-exclusive staging trees under a lock namespace."""

    def __init__(self, namespace: Path):
        self.namespace = namespace

    def build(self, lock_name: str, holder_id: str) -> StagingTree:
        """Create the staging tree for one acquisition attempt.

        The root is created with a plain ``mkdir`` so it fails if the path
        already exists; holder ids are unique, so that never happens between
        well-behaved processes.

        Raises:
            StagingError: If the filesystem rejects any directory creation
        """
        tree = StagingTree(lock_name=lock_name, holder_id=holder_id, root=staging_root_for(self.namespace, holder_id))

        try:
            tree.root.mkdir()
        except OSError as e:
            raise StagingError(lock_name, path=str(tree.root), original_error=e) from e

        try:
            tree.holder.mkdir(parents=True)
        except OSError as e:
            shutil.rmtree(tree.root, ignore_errors=True)
            raise StagingError(lock_name, path=str(tree.holder), original_error=e) from e

        logger.debug(f"Staged {tree.holder}")
        return tree
