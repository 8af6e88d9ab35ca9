"""
Configuration Management Module

환경 변수(.env) 및 저장소 설정 파일(JSON)을 관리하는 모듈
"""
import json
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from ..core.file_types import FileTypeClassifier
from ..core.models import Author, CommitHash, RepoConfiguration

# 환경 변수 로드
load_dotenv()

CONFIG_DATE_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d")


@dataclass
class AppConfig:
    """애플리케이션 전체 설정"""
    log_level: str
    log_file: Optional[str]
    max_workers: int
    git_timeout: int

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """환경 변수에서 설정 로드"""
        return cls(
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_file=os.getenv('LOG_FILE') or None,
            max_workers=int(os.getenv('MAX_WORKERS', '4')),
            git_timeout=int(os.getenv('GIT_TIMEOUT', '300')),
        )


def parse_config_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    설정 파일의 날짜 문자열 파싱

    Args:
        value: "YYYY-MM-DD" 또는 "YYYY-MM-DDTHH:MM:SS"
        end_of_day: 날짜만 주어진 경우 23:59:59 로 맞출지 여부 (until 용)

    Returns:
        datetime 또는 None
    """
    if not value:
        return None
    for date_format in CONFIG_DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, date_format)
        except ValueError:
            continue
        if end_of_day and date_format == "%Y-%m-%d":
            parsed = parsed.replace(hour=23, minute=59, second=59)
        return parsed
    raise ValueError(f"Invalid date in configuration: {value!r}")


def author_from_dict(data: Dict[str, Any]) -> Author:
    if 'git_id' not in data:
        raise ValueError(f"Author entry is missing 'git_id': {data}")
    return Author.from_git_id(
        data['git_id'],
        display_name=data.get('display_name'),
        emails=data.get('emails', []),
        name_aliases=data.get('aliases', []),
    )


def repo_configuration_from_dict(data: Dict[str, Any], base_dir: Optional[Path] = None) -> RepoConfiguration:
    """딕셔너리에서 RepoConfiguration 생성"""
    location = data.get('location', '.')
    if base_dir is not None and not Path(location).is_absolute():
        location = str((base_dir / location).resolve())

    classifier = None
    if data.get('file_types'):
        classifier = FileTypeClassifier.from_mapping(data['file_types'])

    authors = tuple(author_from_dict(author) for author in data.get('authors', []))

    return RepoConfiguration(
        location=location,
        branch=data.get('branch', 'HEAD'),
        since=parse_config_date(data.get('since')),
        until=parse_config_date(data.get('until'), end_of_day=True),
        ignore_commit_list=tuple(CommitHash.convert_strings(data.get('ignore_commits', []))),
        authors=authors,
        file_type_classifier=classifier,
        display_name=data.get('display_name', ''),
        # 작성자 목록이 없으면 모든 작성자를 포함
        auto_register_authors=data.get('auto_register_authors', not authors),
    )


def load_repo_configurations(config_file: str) -> List[RepoConfiguration]:
    """
    저장소 설정 파일 로드

    Args:
        config_file: {"repositories": [...]} 형식의 JSON 파일 경로

    Returns:
        RepoConfiguration 목록
    """
    config_path = Path(config_file)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    repositories = data.get('repositories', [data] if 'location' in data else [])
    return [
        repo_configuration_from_dict(entry, base_dir=config_path.parent)
        for entry in repositories
    ]


class Config:
    """통합 설정 관리 클래스"""

    def __init__(self, config_file: Optional[str] = None):
        """
        설정 초기화

        Args:
            config_file: 저장소 설정 파일 경로 (선택사항)
        """
        self.app = AppConfig.from_env()
        self.repositories: List[RepoConfiguration] = []

        if config_file:
            self.load_from_file(config_file)

    def load_from_file(self, config_file: str):
        """설정 파일에서 저장소 설정 로드"""
        self.repositories = load_repo_configurations(config_file)

    def validate(self) -> List[str]:
        """설정 유효성 검증"""
        errors = []

        if self.app.max_workers < 1:
            errors.append("MAX_WORKERS must be at least 1")
        if self.app.git_timeout < 1:
            errors.append("GIT_TIMEOUT must be at least 1 second")

        for repo in self.repositories:
            if not Path(repo.location).exists():
                errors.append(f"Repository location does not exist: {repo.location}")
            if repo.since and repo.until and repo.since > repo.until:
                errors.append(f"since is after until for {repo.location}")

        return errors
