"""Git operations module.

Usage:
    from relutil.git import Repository

    repo = Repository(Path("/path/to/workspace"))
    sha = repo.resolve_tag("v0.1.0")
"""

from relutil.git.repository import (
    GitError,
    Repository,
    TagOutcome,
    authenticated_url,
)

__all__ = [
    "GitError",
    "Repository",
    "TagOutcome",
    "authenticated_url",
]
