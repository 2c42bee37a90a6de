"""Git repository abstraction.

This module provides the Repository class for the git operations the release
pipeline needs: resolving tags and HEAD, tagging idempotently and pushing a
tag with token credentials. All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/workspace"))

    match repo.tag_head("v1.2.3", "v1.2.3"):
        case Ok(outcome):
            print(f"tag {outcome}")
        case Err(e):
            print(f"tag failed: {e.message}")
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib.parse import quote, urlsplit, urlunsplit

from relutil.core.result import Err, Ok, Result
from relutil.platform.process import ProcessError
from relutil.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = [
    "GitError",
    "Repository",
    "TagOutcome",
    "authenticated_url",
]

TagOutcome = Literal["created", "moved", "unchanged"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def authenticated_url(url: str, *, username: str, token: str) -> str | None:
    """Return an http(s) remote URL carrying `username:token` credentials.

    Any credentials already present in the URL are replaced. Returns None for
    remotes that do not use http(s) (ssh, local paths), which authenticate on
    their own.
    """
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        return None
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    userinfo = f"{quote(username, safe='')}:{quote(token, safe='')}"
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, ""))


def mask_token(text: str, token: str) -> str:
    """Hide `token` in `text`, both as given and URL-quoted."""
    for form in sorted({token, quote(token, safe="")}, key=len, reverse=True):
        if form:
            text = text.replace(form, "***")
    return text


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def head_sha(self) -> Result[str, GitError]:
        """Get the commit id HEAD points to."""
        result = self._run(["rev-parse", "--verify", "HEAD^{commit}"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse HEAD", e, "failed to resolve HEAD"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def resolve_tag(self, tag: str) -> Result[str | None, GitError]:
        """Resolve a tag to the commit it points at.

        Returns:
            Ok(sha) if the tag exists
            Ok(None) if there is no such tag
            Err(GitError) for any other failure
        """
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}^{{commit}}"])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip())
            case Err(e) if e.returncode == 1 and not e.stderr.strip():
                # --verify -q exits 1 silently when the ref is missing.
                return Ok(None)
            case Err(e):
                return Err(self._error(f"rev-parse {tag}", e, f"failed to resolve tag {tag}"))

    def tag_head(self, tag: str, message: str) -> Result[TagOutcome, GitError]:
        """Create an annotated tag at HEAD, idempotently.

        - The tag already points at HEAD: nothing is done ("unchanged").
        - The tag points at another commit: it is moved to HEAD ("moved").
        - The tag does not exist: it is created at HEAD ("created").
        """
        head = self.head_sha()
        if isinstance(head, Err):
            return head

        existing = self.resolve_tag(tag)
        if isinstance(existing, Err):
            return existing

        if existing.value == head.value:
            return Ok("unchanged")

        outcome: TagOutcome = "created" if existing.value is None else "moved"
        args = ["tag", "-a", "-m", message]
        if outcome == "moved":
            args.append("--force")
        args.extend([tag, head.value])

        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(f"tag {tag}", result.error, f"failed to create tag {tag}"))
        return Ok(outcome)

    def config_value(self, key: str, *, scope: Literal["local", "global"]) -> str | None:
        """Read a config value from one scope. None if unset."""
        result = self._run(["config", f"--{scope}", "--get", key])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def user_email(self) -> Result[str, GitError]:
        """Discover the identity email: repository config first, then global."""
        email = self.config_value("user.email", scope="local") or self.config_value(
            "user.email", scope="global"
        )
        if email is None:
            return Err(
                GitError(
                    command="config user.email",
                    message="no user.email in repository or global git config",
                )
            )
        return Ok(email)

    def remote_url(self, remote: str) -> Result[str, GitError]:
        result = self._run(["remote", "get-url", remote])
        match result:
            case Err(e):
                return Err(self._error("remote get-url", e, f"remote not found: {remote}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def push_tag(
        self,
        tag: str,
        *,
        token: str,
        remote: str = "origin",
        force: bool = False,
    ) -> Result[None, GitError]:
        """Push a single tag ref to the remote.

        For http(s) remotes the token is sent as the password with the
        identity email as the user name. A moved tag needs `force=True`.
        """
        email = self.user_email()
        if isinstance(email, Err):
            return email

        url = self.remote_url(remote)
        if isinstance(url, Err):
            return url

        target = authenticated_url(url.value, username=email.value, token=token) or remote
        refspec = f"refs/tags/{tag}:refs/tags/{tag}"
        if force:
            refspec = "+" + refspec

        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        result = self._run(["push", target, refspec], env=env)
        if isinstance(result, Err):
            e = result.error
            detail = mask_token(e.stderr.strip() or e.stdout.strip() or "push failed", token)
            return Err(
                GitError(
                    command=f"push {remote} {refspec}",
                    message=detail,
                    returncode=e.returncode,
                )
            )
        return Ok(None)

    def _run(
        self, args: list[str], env: dict[str, str] | None = None
    ) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        # Network commands inherit git's own timeouts.
        timeout = None if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, env=env, timeout=timeout
        )

    def _error(self, command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or fallback,
            returncode=e.returncode,
        )
