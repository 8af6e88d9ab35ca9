"""
Line Attribution Module - git blame 기반 라인 단위 작성자 귀속

blame 출력과 ignore 목록, 분석 기간, 파일 이름 변경 이력을 조합해
현재 파일의 각 라인을 정규 작성자에게 귀속시킵니다.
"""
import difflib
import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from .commit_analyzer import unquote_git_path
from .models import (
    UNKNOWN_AUTHOR,
    Author,
    CommitHash,
    FileSnapshotResult,
    LineAttribution,
    RepoConfiguration,
    is_inside_commit_list,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

BLAME_HEADER_PATTERN = re.compile(r"^(\^?[0-9a-fA-F]{4,64}) (\d+) (\d+)(?: (\d+))?$")
FULL_HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{40,64}$")
RENAME_STATUS_PATTERN = re.compile(r"^R\d*$")

# (path, revision) -> blame 원문
BlameProvider = Callable[[str, str], str]


@dataclass(frozen=True)
class BlameEntry:
    """blame 출력의 한 라인"""
    line_number: int
    commit_hash: str
    author_name: str = ""
    author_email: str = ""
    author_time: Optional[datetime] = None
    filename: str = ""
    boundary: bool = False
    content: str = ""


@dataclass(frozen=True)
class RenameRecord:
    commit_hash: CommitHash
    old_path: str
    new_path: str


def parse_blame_output(raw: str) -> List[BlameEntry]:
    """
    git blame --porcelain / --line-porcelain 출력 파싱

    --porcelain 은 커밋 메타데이터를 처음 등장할 때만 출력하므로
    커밋별로 캐시해 두고 이후 라인에 재사용합니다.

    Args:
        raw: blame 출력

    Returns:
        최종 라인 번호 순으로 정렬된 BlameEntry 목록
    """
    entries: List[BlameEntry] = []
    metadata_by_commit: Dict[str, Dict[str, str]] = {}
    current_hash = None
    current_line = 0
    current_meta: Dict[str, str] = {}

    for line in raw.split("\n"):
        if line.startswith("\t"):
            if current_hash is None:
                continue
            merged = dict(metadata_by_commit.get(current_hash, {}))
            merged.update(current_meta)
            metadata_by_commit[current_hash] = merged
            entries.append(_build_entry(current_line, current_hash, merged, line[1:]))
            current_hash = None
            current_meta = {}
            continue

        header = BLAME_HEADER_PATTERN.match(line)
        if header and current_hash is None:
            current_hash = header.group(1).lstrip("^")
            current_line = int(header.group(3))
            current_meta = {"boundary": "1"} if header.group(1).startswith("^") else {}
            continue

        if current_hash is not None and line:
            key, _, value = line.partition(" ")
            current_meta[key] = value

    entries.sort(key=lambda entry: entry.line_number)
    return entries


def _build_entry(line_number: int, commit_hash: str, meta: Dict[str, str], content: str) -> BlameEntry:
    author_time = None
    raw_time = meta.get("author-time")
    if raw_time:
        try:
            author_time = datetime.fromtimestamp(int(raw_time))
        except (ValueError, OverflowError, OSError):
            logger.warning(f"Invalid author-time {raw_time!r} for commit {commit_hash}")

    return BlameEntry(
        line_number=line_number,
        commit_hash=commit_hash,
        author_name=meta.get("author", ""),
        author_email=meta.get("author-mail", ""),
        author_time=author_time,
        filename=meta.get("filename", ""),
        boundary="boundary" in meta,
        content=content,
    )


def parse_rename_history(raw: str) -> List[RenameRecord]:
    """
    git log --follow --name-status --format=%H 출력에서 이름 변경 이력 추출

    Returns:
        최신 순 RenameRecord 목록
    """
    renames: List[RenameRecord] = []
    current_hash = None
    for line in raw.split("\n"):
        line = line.strip()
        if not line:
            continue
        if FULL_HASH_PATTERN.match(line):
            current_hash = line
            continue

        parts = line.split("\t")
        if current_hash and len(parts) == 3 and RENAME_STATUS_PATTERN.match(parts[0]):
            renames.append(RenameRecord(
                CommitHash(current_hash), unquote_git_path(parts[1]), unquote_git_path(parts[2])))
    return renames


class LineAttributionAnalyzer:
    """파일 스냅샷의 라인별 작성자 귀속 분석기"""

    def __init__(self, config: RepoConfiguration):
        self.config = config

    def analyze_file(
        self,
        path: str,
        blame_text: str,
        renames: Sequence[RenameRecord] = (),
        blame_provider: Optional[BlameProvider] = None
    ) -> FileSnapshotResult:
        """
        파일 하나의 라인 귀속 계산

        Args:
            path: 현재 파일 경로
            blame_text: 현재 경로에 대한 blame 출력
            renames: 기간 내 이름 변경 이력 (최신 순)
            blame_provider: 이전 경로 blame 을 얻기 위한 콜백

        Returns:
            FileSnapshotResult
        """
        entries = parse_blame_output(blame_text)
        entries = self._stitch_renames(path, entries, list(renames), blame_provider)

        lines = tuple(
            LineAttribution(
                line_number=entry.line_number,
                commit_hash=CommitHash(entry.commit_hash),
                author=self._resolve_author(entry),
                content=entry.content,
            )
            for entry in entries
        )
        return FileSnapshotResult(path=path, file_type=self.config.get_file_type(path), lines=lines)

    def _resolve_author(self, entry: BlameEntry) -> Author:
        if is_inside_commit_list(CommitHash(entry.commit_hash), self.config.ignore_commit_list):
            return UNKNOWN_AUTHOR
        if entry.boundary:
            return UNKNOWN_AUTHOR
        if entry.author_time is not None and not self.config.is_within_window(entry.author_time):
            return UNKNOWN_AUTHOR
        return self.config.get_author(entry.author_name, entry.author_email)

    def _stitch_renames(
        self,
        path: str,
        entries: List[BlameEntry],
        renames: List[RenameRecord],
        blame_provider: Optional[BlameProvider]
    ) -> List[BlameEntry]:
        """
        이름 변경 커밋에 귀속된 라인을 이전 경로의 blame 결과로 되돌림

        이전 경로와 현재 경로의 내용을 정렬하여 일치하는 라인만
        이전 귀속을 이어받습니다 (라인 번호는 현재 기준 유지).
        """
        for index, rename in enumerate(renames):
            if rename.new_path != path:
                continue

            owned = {
                position for position, entry in enumerate(entries)
                if rename.commit_hash.matches(CommitHash(entry.commit_hash))
            }
            if not owned:
                return entries
            if blame_provider is None:
                logger.debug(f"No blame provider for prior path {rename.old_path}; keeping rename attribution")
                return entries

            logger.debug(f"Stitching {path} with prior path {rename.old_path} at {rename.commit_hash}")
            prior_text = blame_provider(rename.old_path, f"{rename.commit_hash}^")
            prior = parse_blame_output(prior_text)
            prior = self._stitch_renames(rename.old_path, prior, renames[index + 1:], blame_provider)

            matcher = difflib.SequenceMatcher(
                None,
                [entry.content for entry in prior],
                [entry.content for entry in entries],
                autojunk=False,
            )
            stitched = list(entries)
            for block in matcher.get_matching_blocks():
                for offset in range(block.size):
                    position = block.b + offset
                    if position in owned:
                        stitched[position] = replace(
                            prior[block.a + offset],
                            line_number=entries[position].line_number,
                        )
            return stitched
        return entries
