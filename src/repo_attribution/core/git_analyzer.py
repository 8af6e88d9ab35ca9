"""
Git Analyzer Module - 분석용 git 원문 수집

이 모듈은 GitPython 을 통해 git log / blame / rename 이력의 원문 텍스트를 얻습니다.
파싱과 귀속 계산은 엔진의 다른 모듈이 담당합니다.
"""
import logging
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import List, Optional

import git
from git import Repo

from .commit_parser import GIT_DATE_FORMAT, GIT_LOG_PRETTY_FORMAT

# 로깅 설정
logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 300

# 비 ASCII 경로를 8진수 이스케이프 없이 출력
GIT_CONFIG_OPTIONS = {"c": "core.quotePath=false"}
GIT_LOCAL_DATE_FORMAT = "--date=format-local:%Y-%m-%dT%H:%M:%S"
BLOB_TYPE = "blob"


def _format_date(moment: datetime) -> str:
    return moment.strftime(GIT_DATE_FORMAT)


class GitAnalyzer:
    """Git 저장소 원문 수집 클래스"""

    def __init__(self, repo_path: str, timeout: Optional[int] = DEFAULT_GIT_TIMEOUT):
        """
        GitAnalyzer 초기화

        Args:
            repo_path: Git 저장소 경로
            timeout: git 명령 하나당 제한 시간(초), None 이면 무제한
        """
        self.repo_path = Path(repo_path).resolve()
        self.timeout = timeout
        self._repo: Optional[Repo] = None
        self._initialize_repo()

    def _initialize_repo(self) -> None:
        """Git 저장소 초기화 및 검증"""
        try:
            self._repo = Repo(self.repo_path)
            if self._repo.bare:
                raise ValueError(f"Cannot analyze bare repository at {self.repo_path}")
            logger.debug(f"Successfully initialized repository at {self.repo_path}")
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            raise ValueError(f"Invalid Git repository at {self.repo_path}")

    @property
    def repo(self) -> Repo:
        """Git 저장소 객체 반환"""
        if self._repo is None:
            self._initialize_repo()
        return self._repo

    def _run(self, command: str, *args, **kwargs) -> str:
        if self.timeout:
            kwargs["kill_after_timeout"] = self.timeout
        # -c 옵션은 Git 객체에 저장되므로 스레드마다 별도 객체를 사용
        runner = git.Git(self.repo.working_dir)(**GIT_CONFIG_OPTIONS)
        return getattr(runner, command)(*args, **kwargs)

    def get_commit_log(
        self,
        branch: str = "HEAD",
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> str:
        """
        커밋 레코드 파서가 기대하는 형식의 git log 출력 반환

        Args:
            branch: 분석할 브랜치
            since: 시작 시각 (포함)
            until: 종료 시각 (포함)

        Returns:
            git log 원문
        """
        args = [branch, "--no-merges", "-i"]
        if since is not None:
            args.append(f"--since={_format_date(since)}")
        if until is not None:
            args.append(f"--until={_format_date(until)}")
        args += [
            f"--pretty=format:{GIT_LOG_PRETTY_FORMAT}",
            GIT_LOCAL_DATE_FORMAT,
            "--numstat",
            "--shortstat",
        ]
        return self._run("log", *args)

    def resolve_revision(self, branch: str = "HEAD", until: Optional[datetime] = None) -> Optional[str]:
        """
        until 시점 기준 분석 대상 커밋 결정

        Returns:
            커밋 해시, 해당 시점 이전 커밋이 없으면 None
        """
        args = ["-1"]
        if until is not None:
            args.append(f"--before={_format_date(until)}")
        args.append(branch)
        revision = self._run("rev-list", *args).strip()
        return revision or None

    def list_files(self, revision: str) -> List[str]:
        """
        revision 시점에 추적 중인 일반 파일 목록

        서브모듈(gitlink) 항목은 blame 대상이 아니므로 제외합니다.
        """
        output = self._run("ls-tree", "-r", "-z", revision)
        files = []
        for entry in output.split("\0"):
            meta, _, path = entry.partition("\t")
            fields = meta.split()
            if path and len(fields) == 3 and fields[1] == BLOB_TYPE:
                files.append(path)
        return files

    def get_blame(self, path: str, revision: str, since: Optional[datetime] = None) -> str:
        args = ["-w", "--root", "--line-porcelain"]
        if since is not None:
            args.append(f"--since={_format_date(since)}")
        args += [revision, "--", path]
        return self._run("blame", *args)

    def get_rename_history(self, path: str, revision: str, since: Optional[datetime] = None) -> str:
        args = ["--follow", "-M", "--name-status", "--format=%H"]
        if since is not None:
            args.append(f"--since={_format_date(since)}")
        args += [revision, "--", path]
        return self._run("log", *args)

    def blame_provider(self, since: Optional[datetime] = None):
        """LineAttributionAnalyzer 에 넘길 (path, revision) -> blame 콜백"""
        return partial(self.get_blame, since=since)
