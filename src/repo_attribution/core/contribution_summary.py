"""
Contribution Summary Module

커밋/라인 귀속 결과를 작성자별 합계로 모읍니다. 모든 함수는 교환/결합 법칙을
만족하는 합산이므로 병렬 작업의 부분 결과를 어떤 순서로 합쳐도 같은 값이 나옵니다.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional

from .models import Author, CommitResult, ContributionCount, FileSnapshotResult, FileType

ContributionMap = Dict[Author, Dict[object, ContributionCount]]


def merge_line_counts(counts: Iterable[Counter]) -> Counter:
    total: Counter = Counter()
    for count in counts:
        total.update(count)
    return total


def author_line_totals(file_results: Iterable[FileSnapshotResult]) -> Counter:
    """파일 스냅샷들의 작성자별 라인 수 합계"""
    return merge_line_counts(result.author_line_counts() for result in file_results)


def merge_contribution_maps(maps: Iterable[ContributionMap]) -> ContributionMap:
    merged: ContributionMap = {}
    for contribution_map in maps:
        for author, buckets in contribution_map.items():
            target = merged.setdefault(author, {})
            for key, count in buckets.items():
                target[key] = target.get(key, ContributionCount()) + count
    return merged


def summarize_file_types(results: Iterable[CommitResult]) -> Dict[Author, Dict[FileType, ContributionCount]]:
    """
    작성자 -> 파일 종류 -> 추가/삭제 합계

    Args:
        results: 필터링된 커밋 결과

    Returns:
        작성자별 파일 종류 기여도
    """
    return merge_contribution_maps(
        {result.author: dict(result.file_type_contributions)} for result in results
    )


def window_start(moment: datetime, period_days: int = 1, since: Optional[datetime] = None) -> date:
    """moment 가 속한 기간의 시작 날짜 (since 가 없으면 0001-01-01 기준)"""
    origin = since.date() if since is not None else date.min
    offset = (moment.date() - origin).days // period_days
    return origin + timedelta(days=offset * period_days)


def summarize_by_period(
    results: Iterable[CommitResult],
    period_days: int = 1,
    since: Optional[datetime] = None
) -> Dict[Author, Dict[date, ContributionCount]]:
    """
    작성자 -> 기간 시작일 -> 추가/삭제 합계

    timestamp 가 없는 커밋은 어느 기간에도 속하지 않으므로 제외합니다.

    Args:
        results: 필터링된 커밋 결과
        period_days: 기간 길이 (1 = 일별, 7 = 주별)
        since: 기간 기준 시작 시각

    Returns:
        작성자별 기간 기여도
    """
    if period_days < 1:
        raise ValueError(f"period_days must be positive, got {period_days}")

    return merge_contribution_maps(
        {
            result.author: {
                window_start(result.timestamp, period_days, since):
                    ContributionCount(result.insertions, result.deletions)
            }
        }
        for result in results
        if result.timestamp is not None
    )
