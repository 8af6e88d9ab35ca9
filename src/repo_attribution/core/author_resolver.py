"""
Author Identity Resolver

git 이 기록한 (이름, 이메일) 쌍을 설정된 정규 작성자로 매핑합니다.
"""
from typing import Dict, Iterable, Tuple

from .models import UNKNOWN_AUTHOR, WILDCARD, Author
from ..utils.logger import get_logger

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    """blame 출력의 <user@host> 형태에서 꺾쇠 제거"""
    email = (email or "").strip()
    if email.startswith("<") and email.endswith(">"):
        email = email[1:-1]
    return email


class AuthorIdentityResolver:
    """작성자 별칭 테이블"""

    def __init__(self, authors: Iterable[Author], auto_register: bool = False):
        """
        별칭 테이블 구성

        Args:
            authors: 설정된 작성자 목록
            auto_register: 일치하는 작성자가 없을 때 git 이름으로 새 Author 를 만들지 여부
        """
        self.auto_register = auto_register
        self._exact: Dict[Tuple[str, str], Author] = {}
        self._by_name: Dict[str, Author] = {}
        self._by_email: Dict[str, Author] = {}
        self._catch_all = None

        for author in authors:
            for name, email in sorted(author.aliases):
                if name != WILDCARD and email != WILDCARD:
                    self._register(self._exact, (name, email), author)
                elif email == WILDCARD and name != WILDCARD:
                    self._register(self._by_name, name, author)
                elif name == WILDCARD and email != WILDCARD:
                    self._register(self._by_email, email, author)
                elif self._catch_all is None:
                    self._catch_all = author

    @staticmethod
    def _register(table: dict, key, author: Author) -> None:
        existing = table.get(key)
        if existing is not None and existing != author:
            logger.warning(
                f"Alias {key} is claimed by both {existing.git_id} and {author.git_id}; "
                f"keeping {existing.git_id}"
            )
            return
        table[key] = author

    def resolve(self, name: str, email: str) -> Author:
        """
        (이름, 이메일) 쌍에 해당하는 Author 반환

        Args:
            name: git 작성자 이름 (대소문자 구분)
            email: git 작성자 이메일 (대소문자 구분, 꺾쇠 허용)

        Returns:
            일치하는 Author, 없으면 UNKNOWN_AUTHOR
        """
        email = normalize_email(email)
        author = self._exact.get((name, email))
        if author is not None:
            return author

        author = self._by_name.get(name)
        if author is not None:
            return author

        author = self._by_email.get(email)
        if author is not None:
            return author

        if self._catch_all is not None:
            return self._catch_all
        if self.auto_register and name:
            return Author.from_git_id(name)
        return UNKNOWN_AUTHOR
