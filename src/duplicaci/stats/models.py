"""Statistics structures in the shape the Duplicacy Web UI stores them."""

from dataclasses import dataclass, field


@dataclass
class RepoStats:
    """Statistics for one repository (snapshot id) in a storage."""

    revisions: int = 0
    total_size: int = 0
    unique_size: int = 0
    total_chunks: int = 0

    def to_dict(self) -> dict:
        return {
            "revisions": self.revisions,
            "total-size": self.total_size,
            "unique-size": self.unique_size,
            "total-chunks": self.total_chunks,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RepoStats":
        return cls(
            revisions=data.get("revisions", 0),
            total_size=data.get("total-size", 0),
            unique_size=data.get("unique-size", 0),
            total_chunks=data.get("total-chunks", 0),
        )


@dataclass
class DayStats:
    """One day's snapshot of a storage.

    Attributes:
        total_size: Total chunk size in bytes
        total_chunks: Total number of chunks
        pruned_chunks: Chunks removed by prune
        pruned_revisions: Revisions removed by prune
        status: Status label shown by the Web UI
        repositories: Per-repository statistics keyed by repository name
    """

    total_size: int = 0
    total_chunks: int = 0
    pruned_chunks: int = 0
    pruned_revisions: int = 0
    status: str = ""
    repositories: dict[str, RepoStats] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total-size": self.total_size,
            "total-chunks": self.total_chunks,
            "pruned-chunks": self.pruned_chunks,
            "pruned-revisions": self.pruned_revisions,
            "status": self.status,
            "repositories": {
                name: repo.to_dict() for name, repo in self.repositories.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DayStats":
        repositories = data.get("repositories") or {}
        return cls(
            total_size=data.get("total-size", 0),
            total_chunks=data.get("total-chunks", 0),
            pruned_chunks=data.get("pruned-chunks", 0),
            pruned_revisions=data.get("pruned-revisions", 0),
            status=data.get("status", ""),
            repositories={
                name: RepoStats.from_dict(repo) for name, repo in repositories.items()
            },
        )


# Archive of a storage: calendar date (YYYY-MM-DD) -> statistics
StorageStats = dict[str, DayStats]


def stats_to_dict(stats: StorageStats) -> dict:
    return {day: day_stats.to_dict() for day, day_stats in stats.items()}


def stats_from_dict(data: dict) -> StorageStats:
    return {day: DayStats.from_dict(value or {}) for day, value in data.items()}
