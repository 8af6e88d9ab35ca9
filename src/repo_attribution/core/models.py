"""
Attribution Data Models

커밋/라인 기여도 분석에 사용되는 값 객체 정의
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

WILDCARD = "*"
MIN_ABBREVIATED_LENGTH = 7


@dataclass(frozen=True, eq=False)
class Author:
    """
    정규화된 작성자

    동일성은 git_id 로만 판단합니다. aliases 는 (name, email) 쌍의 집합이며
    둘 중 하나는 와일드카드("*")일 수 있습니다.
    """
    git_id: str
    display_name: str = ""
    aliases: FrozenSet[Tuple[str, str]] = frozenset()

    @classmethod
    def from_git_id(
        cls,
        git_id: str,
        display_name: Optional[str] = None,
        emails: Iterable[str] = (),
        name_aliases: Iterable[str] = ()
    ) -> 'Author':
        """
        git id 와 이메일 목록으로 Author 생성

        Args:
            git_id: 정규 작성자 식별자
            display_name: 보고서용 표시 이름 (None 이면 git_id)
            emails: 작성자 이메일 목록 (없으면 이메일 무관 매칭)
            name_aliases: git_id 외에 같은 사람으로 취급할 이름들

        Returns:
            Author 인스턴스
        """
        emails = list(emails)
        if emails:
            aliases = {(git_id, email) for email in emails}
        else:
            aliases = {(git_id, WILDCARD)}
        aliases.update((alias, WILDCARD) for alias in name_aliases)
        return cls(git_id=git_id, display_name=display_name or git_id, aliases=frozenset(aliases))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Author):
            return NotImplemented
        return self.git_id == other.git_id

    def __hash__(self) -> int:
        return hash(self.git_id)

    def __str__(self) -> str:
        return self.git_id


UNKNOWN_AUTHOR = Author(git_id="-", display_name="Unknown")


@dataclass(frozen=True)
class CommitHash:
    """커밋 해시 (전체 또는 축약형)"""
    value: str

    def __post_init__(self):
        object.__setattr__(self, "value", self.value.strip().lower())

    def matches(self, other: 'CommitHash') -> bool:
        """
        축약형을 허용하는 해시 비교

        값이 같거나, 한쪽이 다른 쪽의 접두사이고 짧은 쪽의 길이가
        MIN_ABBREVIATED_LENGTH 이상이면 같은 커밋으로 판단합니다.
        """
        if self.value == other.value:
            return True
        shorter, longer = sorted((self.value, other.value), key=len)
        return len(shorter) >= MIN_ABBREVIATED_LENGTH and longer.startswith(shorter)

    @staticmethod
    def convert_strings(values: Iterable[str]) -> List['CommitHash']:
        return [CommitHash(value) for value in values if value and value.strip()]

    def __str__(self) -> str:
        return self.value


def is_inside_commit_list(commit_hash: CommitHash, commit_list: Iterable[CommitHash]) -> bool:
    """ignore 목록과 라인 귀속 모두에서 사용하는 공용 판정 함수"""
    return any(commit_hash.matches(candidate) for candidate in commit_list)


@dataclass(frozen=True, eq=False)
class FileType:
    """파일 분류 (라벨 기준 동일성)"""
    label: str
    patterns: Tuple[str, ...] = ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileType):
            return NotImplemented
        return self.label == other.label

    def __hash__(self) -> int:
        return hash(self.label)

    def __str__(self) -> str:
        return self.label


FileType.OTHER = FileType("other")


@dataclass(frozen=True)
class ContributionCount:
    """추가/삭제 라인 수"""
    insertions: int = 0
    deletions: int = 0

    def __add__(self, other: 'ContributionCount') -> 'ContributionCount':
        if not isinstance(other, ContributionCount):
            return NotImplemented
        return ContributionCount(self.insertions + other.insertions, self.deletions + other.deletions)

    @property
    def total(self) -> int:
        return self.insertions + self.deletions

    def to_dict(self) -> Dict[str, int]:
        return {"insertions": self.insertions, "deletions": self.deletions}


@dataclass(frozen=True)
class CommitRecord:
    """git log 레코드 하나를 필드 단위로 나눈 중간 결과"""
    hash: str
    author_name: str
    author_email: str
    date: str
    message_title: str
    message_body: str
    tags: Optional[Tuple[str, ...]]
    stat_lines: Tuple[str, ...] = ()
    summary_line: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.stat_lines and not self.summary_line


@dataclass(frozen=True)
class CommitResult:
    author: Author
    hash: CommitHash
    timestamp: Optional[datetime]
    message_title: str
    message_body: str
    tags: Optional[Tuple[str, ...]]
    insertions: int = 0
    deletions: int = 0
    file_type_contributions: Mapping[FileType, ContributionCount] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # 읽기 전용 사본으로 보관
        contributions = MappingProxyType(dict(self.file_type_contributions))
        object.__setattr__(self, "file_type_contributions", contributions)

    def to_dict(self) -> Dict[str, Any]:
        """JSON 직렬화용 dict (태그가 없으면 tags 키 자체를 생략)"""
        data: Dict[str, Any] = {
            "author": self.author.git_id,
            "hash": self.hash.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "message_title": self.message_title,
            "message_body": self.message_body,
            "insertions": self.insertions,
            "deletions": self.deletions,
            "file_types": {
                file_type.label: count.to_dict()
                for file_type, count in self.file_type_contributions.items()
            },
        }
        if self.tags is not None:
            data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class LineAttribution:
    line_number: int
    commit_hash: CommitHash
    author: Author
    content: str = ""


@dataclass(frozen=True)
class FileSnapshotResult:
    """한 시점에서 파일의 모든 라인에 대한 작성자 귀속 결과"""
    path: str
    file_type: FileType
    lines: Tuple[LineAttribution, ...] = ()

    def get_line(self, line_number: int) -> LineAttribution:
        return self.lines[line_number - 1]

    def author_line_counts(self) -> Counter:
        return Counter(line.author for line in self.lines)


@dataclass(frozen=True)
class RepoConfiguration:
    """
    저장소 분석 설정

    엔진 입장에서는 읽기 전용이며, 작성자 해석과 파일 분류는
    생성 시 주입된 resolver / classifier 에 위임합니다.
    """
    location: str
    branch: str = "HEAD"
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    ignore_commit_list: Tuple[CommitHash, ...] = ()
    authors: Tuple[Author, ...] = ()
    file_type_classifier: Optional[Callable[[str], FileType]] = field(default=None, compare=False)
    display_name: str = ""
    auto_register_authors: bool = False
    _resolver: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        # 순환 import 방지
        from .author_resolver import AuthorIdentityResolver
        object.__setattr__(self, "ignore_commit_list", tuple(self.ignore_commit_list))
        object.__setattr__(self, "authors", tuple(self.authors))
        # 작성자 목록이 있으면 목록 밖의 작성자는 항상 UNKNOWN_AUTHOR
        auto_register = self.auto_register_authors and not self.authors
        object.__setattr__(self, "auto_register_authors", auto_register)
        resolver = AuthorIdentityResolver(self.authors, auto_register=auto_register)
        object.__setattr__(self, "_resolver", resolver)

    def get_author(self, name: str, email: str) -> Author:
        return self._resolver.resolve(name, email)

    def get_file_type(self, path: str) -> FileType:
        if self.file_type_classifier is None:
            from .file_types import DEFAULT_CLASSIFIER
            return DEFAULT_CLASSIFIER(path)
        return self.file_type_classifier(path)

    def is_within_window(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        if self.since is not None and moment < self.since:
            return False
        if self.until is not None and moment > self.until:
            return False
        return True
