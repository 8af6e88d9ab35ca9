"""
Core modules for repo-attribution
"""

from .models import (
    UNKNOWN_AUTHOR,
    Author,
    CommitHash,
    CommitRecord,
    CommitResult,
    ContributionCount,
    FileSnapshotResult,
    FileType,
    LineAttribution,
    RepoConfiguration,
    is_inside_commit_list,
)
from .author_resolver import AuthorIdentityResolver
from .file_types import FileTypeClassifier
from .commit_parser import parse_commit_record, split_log_output
from .commit_analyzer import aggregate_commit_results, analyze_commit, analyze_commits
from .line_attribution import LineAttributionAnalyzer, parse_blame_output, parse_rename_history
from .git_analyzer import GitAnalyzer
from .analysis_runner import ContributionAnalysisRunner, RepoAnalysisReport

__all__ = [
    "UNKNOWN_AUTHOR",
    "Author",
    "CommitHash",
    "CommitRecord",
    "CommitResult",
    "ContributionCount",
    "FileSnapshotResult",
    "FileType",
    "LineAttribution",
    "RepoConfiguration",
    "is_inside_commit_list",
    "AuthorIdentityResolver",
    "FileTypeClassifier",
    "parse_commit_record",
    "split_log_output",
    "analyze_commit",
    "analyze_commits",
    "aggregate_commit_results",
    "LineAttributionAnalyzer",
    "parse_blame_output",
    "parse_rename_history",
    "GitAnalyzer",
    "ContributionAnalysisRunner",
    "RepoAnalysisReport",
]
