"""Repository host providers (GitHub, GitLab)."""
