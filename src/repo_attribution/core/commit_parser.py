"""
Commit Record Parser

git log 출력(커스텀 pretty format + numstat/shortstat)을 CommitRecord 로 변환합니다.
"""
import re
from typing import List, Tuple

from .models import CommitRecord

COMMIT_INFO_DELIMITER = ">>>COMMIT INFO<<<\n"
LOG_SPLITTER = "|\n|"
REF_SPLITTER = ", "
TAG_PREFIX = "tag:"
FIELD_COUNT = 7

GIT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
GIT_LOG_PRETTY_FORMAT = (
    ">>>COMMIT INFO<<<%n%H|%n|%aN|%n|%aE|%n|%ad|%n|%s|%n|%w(0,4,4)%b%w(0,0,0)|%n|%D|"
)

MESSAGE_BODY_LEADING_PATTERN = re.compile(r"^ {4}", re.MULTILINE)

HASH_INDEX = 0
AUTHOR_INDEX = 1
EMAIL_INDEX = 2
DATE_INDEX = 3
MESSAGE_TITLE_INDEX = 4
MESSAGE_BODY_INDEX = 5
REF_NAME_INDEX = 6


def split_log_output(raw: str) -> List[Tuple[str, str]]:
    """
    git log 전체 출력을 (info_line, stat_block) 목록으로 분리

    Args:
        raw: GIT_LOG_PRETTY_FORMAT 과 --numstat --shortstat 로 얻은 출력

    Returns:
        커밋별 (info_line, stat_block) 튜플 목록 (git log 순서 유지)
    """
    records = []
    for chunk in raw.split(COMMIT_INFO_DELIMITER):
        chunk = chunk.rstrip("\n")
        if not chunk.strip():
            continue

        if chunk.endswith("|"):
            info_line, stat_text = chunk[:-1], ""
        else:
            separator_index = chunk.rfind("|\n")
            if separator_index == -1:
                info_line, stat_text = chunk, ""
            else:
                info_line, stat_text = chunk[:separator_index], chunk[separator_index + 2:]

        stat_lines = [line for line in stat_text.split("\n") if line.strip()]
        records.append((info_line, "\n".join(stat_lines)))
    return records


def parse_commit_record(info_line: str, stat_block: str = "") -> CommitRecord:
    """
    레코드 하나를 필드 단위로 파싱

    메시지 본문에 구분자가 포함되어도 필드 수는 최대 7개로 제한되며,
    부족한 필드는 빈 문자열로 채웁니다.

    Args:
        info_line: "|\\n|" 로 구분된 커밋 정보
        stat_block: 파일별 numstat 라인들 + 마지막 요약 라인

    Returns:
        CommitRecord
    """
    elements = info_line.split(LOG_SPLITTER, FIELD_COUNT - 1)
    elements += [""] * (FIELD_COUNT - len(elements))

    stat_lines: Tuple[str, ...] = ()
    summary_line = ""
    if stat_block.strip():
        lines = [line for line in stat_block.split("\n") if line.strip()]
        stat_lines = tuple(lines[:-1])
        summary_line = lines[-1]

    return CommitRecord(
        hash=elements[HASH_INDEX].strip(),
        author_name=elements[AUTHOR_INDEX],
        author_email=elements[EMAIL_INDEX],
        date=elements[DATE_INDEX].strip(),
        message_title=elements[MESSAGE_TITLE_INDEX],
        message_body=get_commit_message_body(elements[MESSAGE_BODY_INDEX]),
        tags=extract_tags(elements[REF_NAME_INDEX]),
        stat_lines=stat_lines,
        summary_line=summary_line,
    )


def get_commit_message_body(raw: str) -> str:
    return MESSAGE_BODY_LEADING_PATTERN.sub("", raw)


def extract_tags(raw_refs: str):
    """
    ref 목록에서 태그 이름만 추출

    "HEAD -> main, tag: v1.0" -> ("v1.0",), 태그가 없으면 None
    """
    refs = raw_refs.split(REF_SPLITTER) if raw_refs else []
    tags = tuple(
        ref[ref.rfind(TAG_PREFIX) + len(TAG_PREFIX):].strip()
        for ref in refs
        if TAG_PREFIX in ref
    )
    return tags or None
