"""Git access for the local repository mirror.

Usage:
    from relwatch.git import Repository, sync_mirror

    repo = Repository(Path("opentrons_repo"))
    tags = repo.list_tags(sort="-creatordate")
"""

from relwatch.git.mirror import sync_mirror
from relwatch.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
    "sync_mirror",
]
