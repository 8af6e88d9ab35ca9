"""
repo-attribution

git 저장소의 커밋/라인 단위 기여도를 정규 작성자에게 귀속시키는 분석 엔진
"""

__version__ = "0.1.0"

# Core modules - data models
from .core.models import (
    UNKNOWN_AUTHOR,
    Author,
    CommitHash,
    CommitResult,
    FileSnapshotResult,
    FileType,
    RepoConfiguration,
)

# Core modules - analyzers
from .core.commit_analyzer import analyze_commits
from .core.line_attribution import LineAttributionAnalyzer
from .core.git_analyzer import GitAnalyzer
from .core.analysis_runner import ContributionAnalysisRunner, RepoAnalysisReport

# Utility modules - configuration and logging
from .utils.config import Config
from .utils.logger import get_logger, setup_logger, LogContext

__all__ = [
    "UNKNOWN_AUTHOR",
    "Author",
    "CommitHash",
    "CommitResult",
    "FileSnapshotResult",
    "FileType",
    "RepoConfiguration",
    "analyze_commits",
    "LineAttributionAnalyzer",
    "GitAnalyzer",
    "ContributionAnalysisRunner",
    "RepoAnalysisReport",
    "Config",
    "get_logger",
    "setup_logger",
    "LogContext",
    "create_runner",
]


def create_runner(config: Config = None) -> ContributionAnalysisRunner:
    """
    환경 설정으로 분석 실행기를 생성합니다.

    Args:
        config: 설정 객체 (기본값: None, 환경변수 사용)

    Returns:
        ContributionAnalysisRunner 인스턴스
    """
    config = config or Config()
    return ContributionAnalysisRunner(
        max_workers=config.app.max_workers,
        git_timeout=config.app.git_timeout,
    )
