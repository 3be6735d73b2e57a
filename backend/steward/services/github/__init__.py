from steward.services.github.client import GitHubClient, GitHubError, GitHubNotFoundError

__all__ = ["GitHubClient", "GitHubError", "GitHubNotFoundError"]
