"""
Commit Stat Analyzer Module

git log 레코드에서 작성자, 시간, 태그, 파일 종류별 추가/삭제 라인 수를 계산하고
커밋 결과 목록을 필터링/정렬합니다.
"""
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from .commit_parser import GIT_DATE_FORMAT, parse_commit_record
from .models import (
    UNKNOWN_AUTHOR,
    CommitHash,
    CommitRecord,
    CommitResult,
    ContributionCount,
    FileType,
    RepoConfiguration,
    is_inside_commit_list,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

MESSAGE_START_ANALYZING_COMMIT_INFO = "Analyzing commits info for {location} ({branch})..."

TAB_SPLITTER = "\t"
MOVED_FILE_INDICATION = "=> "
BINARY_STAT = "-"

INSERTION_PATTERN = re.compile(r"([0-9]+) insertion")
DELETION_PATTERN = re.compile(r"([0-9]+) deletion")
BRACE_MOVE_PATTERN = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")
QUOTED_PATH_ESCAPE_PATTERN = re.compile(r"\\([0-7]{3}|.)", re.DOTALL)
QUOTED_PATH_CHARACTERS = {
    "a": "\a", "b": "\b", "t": "\t", "n": "\n", "v": "\v", "f": "\f", "r": "\r",
    "\"": "\"", "\\": "\\",
}


def analyze_commit(record: CommitRecord, config: RepoConfiguration) -> CommitResult:
    """
    CommitRecord 하나를 CommitResult 로 변환

    작성자를 찾지 못해도 UNKNOWN_AUTHOR 로 결과를 만들며,
    날짜 파싱 실패 시 timestamp 는 None 이 됩니다.

    Args:
        record: 파싱된 커밋 레코드
        config: 저장소 설정

    Returns:
        커밋 분석 결과
    """
    author = config.get_author(record.author_name, record.author_email)
    timestamp = parse_commit_date(record.date, record.hash)

    if record.is_empty:  # 빈 커밋
        return CommitResult(
            author=author,
            hash=CommitHash(record.hash),
            timestamp=timestamp,
            message_title=record.message_title,
            message_body=record.message_body,
            tags=record.tags,
        )

    file_type_contributions = get_file_type_contributions(record.stat_lines, config, record.hash)
    return CommitResult(
        author=author,
        hash=CommitHash(record.hash),
        timestamp=timestamp,
        message_title=record.message_title,
        message_body=record.message_body,
        tags=record.tags,
        insertions=get_insertions(record.summary_line),
        deletions=get_deletions(record.summary_line),
        file_type_contributions=file_type_contributions,
    )


def analyze_raw_commit(info_line: str, stat_block: str, config: RepoConfiguration) -> CommitResult:
    return analyze_commit(parse_commit_record(info_line, stat_block), config)


def parse_commit_date(raw: str, commit_hash: str = "") -> Optional[datetime]:
    try:
        return datetime.strptime(raw, GIT_DATE_FORMAT)
    except ValueError as e:
        logger.warning(f"Unable to parse the date from git log result for commit {commit_hash}: {e}")
        return None


def get_file_type_contributions(
    stat_lines: Iterable[str],
    config: RepoConfiguration,
    commit_hash: str = ""
) -> Dict[FileType, ContributionCount]:
    """
    파일별 numstat 라인을 파일 종류별로 합산

    Args:
        stat_lines: "추가<TAB>삭제<TAB>경로" 형식의 라인들
        config: 파일 분류에 사용할 저장소 설정
        commit_hash: 로그 메시지용 커밋 해시

    Returns:
        FileType -> ContributionCount
    """
    contributions: Dict[FileType, ContributionCount] = {}
    for line in stat_lines:
        parsed = parse_stat_line(line)
        if parsed is None:
            logger.warning(f"Skipping malformed stat line in commit {commit_hash}: {line!r}")
            continue

        count, file_path = parsed
        file_type = config.get_file_type(file_path)
        contributions[file_type] = contributions.get(file_type, ContributionCount()) + count
    return contributions


def parse_stat_line(line: str) -> Optional[Tuple[ContributionCount, str]]:
    infos = line.split(TAB_SPLITTER, 2)
    if len(infos) < 3:
        return None
    try:
        insertions = _parse_stat_number(infos[0])
        deletions = _parse_stat_number(infos[1])
    except ValueError:
        return None
    return ContributionCount(insertions, deletions), extract_file_path(infos[2])


def _parse_stat_number(raw: str) -> int:
    raw = raw.strip()
    if raw == BINARY_STAT:  # 바이너리 파일
        return 0
    return int(raw)


def extract_file_path(file_path: str) -> str:
    """
    이동/이름 변경 표기에서 최종 경로 추출

    "fileA => newPos/fileA" -> "newPos/fileA"
    "oldName => newPos/{movedFile.java}" -> "newPos/movedFile.java"
    """
    filtered = file_path.strip()
    brace_move = BRACE_MOVE_PATTERN.match(filtered)
    if brace_move:
        prefix, _, new_part, suffix = brace_move.groups()
        # "{old => }/Foo.java" 처럼 앞부분이 비면 선행 / 가 남는다
        moved = unquote_git_path(prefix + new_part + suffix)
        return moved.replace("//", "/").lstrip("/")

    index = filtered.find(MOVED_FILE_INDICATION)
    if index != -1:
        filtered = filtered[index + len(MOVED_FILE_INDICATION):]
        if filtered.endswith("}"):
            filtered = filtered[:-1].replace("{", "")
    return unquote_git_path(filtered)


def unquote_git_path(path: str) -> str:
    """
    git 이 따옴표로 감싼 경로 복원

    탭, 따옴표 등 특수 문자가 있는 경로는 core.quotePath 설정과 무관하게
    C 스타일 이스케이프로 출력됩니다. 8진수 이스케이프는 UTF-8 바이트로 해석합니다.

    "\"src/caf\\303\\251.java\"" -> "src/café.java"
    """
    if len(path) < 2 or not (path.startswith("\"") and path.endswith("\"")):
        return path

    inner = path[1:-1]
    raw = bytearray()
    position = 0
    for escape in QUOTED_PATH_ESCAPE_PATTERN.finditer(inner):
        raw += inner[position:escape.start()].encode("utf-8")
        code = escape.group(1)
        if len(code) == 3 and int(code, 8) < 256:
            raw.append(int(code, 8))
        else:
            raw += QUOTED_PATH_CHARACTERS.get(code, code).encode("utf-8")
        position = escape.end()
    raw += inner[position:].encode("utf-8")
    return raw.decode("utf-8", errors="replace")


def get_insertions(summary_line: str) -> int:
    return _get_number_with_pattern(summary_line, INSERTION_PATTERN)


def get_deletions(summary_line: str) -> int:
    return _get_number_with_pattern(summary_line, DELETION_PATTERN)


def _get_number_with_pattern(raw: str, pattern: re.Pattern) -> int:
    match = pattern.search(raw)
    return int(match.group(1)) if match else 0


def sort_key(result: CommitResult):
    # timestamp 가 없는 결과가 가장 앞에 온다
    if result.timestamp is None:
        return (0, datetime.min)
    return (1, result.timestamp)


def aggregate_commit_results(results: Iterable[CommitResult], config: RepoConfiguration) -> List[CommitResult]:
    """
    작성자/ignore 목록 기준으로 필터링 후 시간순 정렬

    Args:
        results: 커밋 분석 결과들
        config: 저장소 설정

    Returns:
        UNKNOWN_AUTHOR 와 무시 대상 커밋을 제외하고 timestamp 오름차순으로 정렬된 목록
    """
    logger.info(MESSAGE_START_ANALYZING_COMMIT_INFO.format(location=config.location, branch=config.branch))

    retained = [
        result for result in results
        if result.author != UNKNOWN_AUTHOR
        and not is_inside_commit_list(result.hash, config.ignore_commit_list)
    ]
    return sorted(retained, key=sort_key)


def analyze_commits(records: Iterable[CommitRecord], config: RepoConfiguration) -> List[CommitResult]:
    return aggregate_commit_results((analyze_commit(record, config) for record in records), config)
