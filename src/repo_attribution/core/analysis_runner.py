"""
Analysis Runner Module - 저장소/파일 단위 병렬 분석

저장소 하나 또는 파일 하나가 하나의 작업 단위이며, 한 단위의 실패는
로그와 에러 목록에만 남고 다른 단위의 결과에는 영향을 주지 않습니다.
"""
from collections import Counter
from contextlib import nullcontext
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from .commit_analyzer import aggregate_commit_results, analyze_commit
from .commit_parser import parse_commit_record, split_log_output
from .contribution_summary import author_line_totals
from .git_analyzer import DEFAULT_GIT_TIMEOUT, GitAnalyzer
from .line_attribution import LineAttributionAnalyzer, parse_rename_history
from .models import CommitResult, FileSnapshotResult, RepoConfiguration
from ..utils.logger import LogContext, get_logger, log_execution_time

logger = get_logger(__name__)


@dataclass
class RepoAnalysisReport:
    """저장소 하나의 분석 결과"""
    config: RepoConfiguration
    revision: Optional[str] = None
    commit_results: List[CommitResult] = field(default_factory=list)
    file_results: List[FileSnapshotResult] = field(default_factory=list)
    author_line_totals: Counter = field(default_factory=Counter)
    errors: List[str] = field(default_factory=list)

    def add_error(self, error: str):
        self.errors.append(error)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class ContributionAnalysisRunner:
    """커밋/라인 귀속 분석 실행기"""

    def __init__(
        self,
        max_workers: int = 4,
        git_timeout: Optional[int] = DEFAULT_GIT_TIMEOUT,
        analyzer_factory: Optional[Callable[[str], GitAnalyzer]] = None
    ):
        """
        실행기 초기화

        Args:
            max_workers: 작업자 스레드 수
            git_timeout: git 명령 하나당 제한 시간(초)
            analyzer_factory: 저장소 경로 -> GitAnalyzer (테스트용 주입)
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.max_workers = max_workers
        self.analyzer_factory = analyzer_factory or (lambda path: GitAnalyzer(path, timeout=git_timeout))

    def analyze_commits(self, git_analyzer: GitAnalyzer, config: RepoConfiguration) -> List[CommitResult]:
        raw_log = git_analyzer.get_commit_log(config.branch, config.since, config.until)
        results = [
            analyze_commit(parse_commit_record(info_line, stat_block), config)
            for info_line, stat_block in split_log_output(raw_log)
        ]
        return aggregate_commit_results(results, config)

    def analyze_file(
        self,
        git_analyzer: GitAnalyzer,
        config: RepoConfiguration,
        path: str,
        revision: str
    ) -> FileSnapshotResult:
        blame_text = git_analyzer.get_blame(path, revision, config.since)
        renames = parse_rename_history(git_analyzer.get_rename_history(path, revision, config.since))
        return LineAttributionAnalyzer(config).analyze_file(
            path,
            blame_text,
            renames=renames,
            blame_provider=git_analyzer.blame_provider(config.since),
        )

    def analyze_repository(
        self,
        config: RepoConfiguration,
        paths: Optional[Iterable[str]] = None,
        executor: Optional[ThreadPoolExecutor] = None
    ) -> RepoAnalysisReport:
        """
        저장소 하나 분석

        Args:
            config: 저장소 설정
            paths: 분석할 파일 목록 (None 이면 분석 시점의 모든 추적 파일)
            executor: 파일 분석에 사용할 공유 풀 (None 이면 이 호출 전용 풀을 생성)

        Returns:
            RepoAnalysisReport
        """
        report = RepoAnalysisReport(config=config)
        with LogContext(f"analysis of {config.location} ({config.branch})", logger):
            git_analyzer = self.analyzer_factory(config.location)
            report.commit_results = self.analyze_commits(git_analyzer, config)

            report.revision = git_analyzer.resolve_revision(config.branch, config.until)
            if report.revision is None:
                logger.warning(f"No commit found in {config.location} before {config.until}")
                return report

            targets = list(paths) if paths is not None else git_analyzer.list_files(report.revision)
            results: Dict[str, FileSnapshotResult] = {}
            pool = nullcontext(executor) if executor is not None else ThreadPoolExecutor(max_workers=self.max_workers)
            with pool as file_executor:
                futures = {
                    file_executor.submit(self.analyze_file, git_analyzer, config, path, report.revision): path
                    for path in targets
                }
                for future in as_completed(futures):
                    path = futures[future]
                    try:
                        results[path] = future.result()
                    except Exception as e:
                        logger.error(f"Failed to analyze file {path} in {config.location}: {e}")
                        report.add_error(f"{path}: {e}")

            # 입력 순서대로 정렬
            report.file_results = [results[path] for path in targets if path in results]
            report.author_line_totals = author_line_totals(report.file_results)
        return report

    @log_execution_time
    def analyze_repositories(self, configs: Iterable[RepoConfiguration]) -> List[RepoAnalysisReport]:
        """
        여러 저장소를 병렬로 분석 (입력 순서대로 반환)

        파일 작업은 모든 저장소가 하나의 풀을 공유하므로 전체 스레드 수는 max_workers * 2 를 넘지 않습니다.
        """
        configs = list(configs)
        reports: List[Optional[RepoAnalysisReport]] = [None] * len(configs)
        with ThreadPoolExecutor(max_workers=self.max_workers) as repo_executor, \
                ThreadPoolExecutor(max_workers=self.max_workers) as file_executor:
            futures = {
                repo_executor.submit(self.analyze_repository, config, None, file_executor): index
                for index, config in enumerate(configs)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    reports[index] = future.result()
                except Exception as e:
                    config = configs[index]
                    logger.error(f"Failed to analyze repository {config.location}: {e}")
                    failed = RepoAnalysisReport(config=config)
                    failed.add_error(str(e))
                    reports[index] = failed
        return reports
