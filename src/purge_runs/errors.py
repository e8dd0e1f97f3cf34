"""Exceptions raised by purge-runs."""


class PurgeRunsError(Exception):
    """Base class for purge-runs errors."""


class GitHubAPIError(PurgeRunsError):
    """Raised when the GitHub API answers with a non-success status."""

    def __init__(self, status_code: int, message: str, url: str) -> None:
        self.status_code = status_code
        self.message = message
        self.url = url
        super().__init__(f"GitHub API returned {status_code} for {url}: {message}")


class MissingTokenError(PurgeRunsError):
    """Raised when no GitHub token can be found."""

    def __init__(self) -> None:
        super().__init__("No GitHub token found. Set GITHUB_TOKEN or pass --token.")


class MissingRepositoryError(PurgeRunsError):
    """Raised when no repository identity was given."""

    def __init__(self) -> None:
        super().__init__(
            "No repository given. Pass OWNER/REPO or set GITHUB_REPOSITORY."
        )


class InvalidRepositoryError(PurgeRunsError, ValueError):
    """Raised when a repository identity is not in owner/repo form."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Cannot parse repository: '{value}'. Expected 'owner/repo'.")
