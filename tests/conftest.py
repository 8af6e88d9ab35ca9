"""
공용 테스트 fixture
"""
from pathlib import Path

import pytest
from git import Actor, Repo

ALICE = Actor("Alice", "alice@example.com")
BOB = Actor("Bob", "bob@example.com")


class RepoBuilder:
    """테스트용 임시 Git 저장소 작성 도우미"""

    def __init__(self, path: Path):
        self.path = path
        self.repo = Repo.init(path)
        with self.repo.config_writer() as writer:
            writer.set_value("user", "name", "Test User")
            writer.set_value("user", "email", "test@example.com")

    def write(self, relative_path: str, content: str):
        target = self.path / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        self.repo.index.add([relative_path])

    def move(self, source: str, destination: str):
        (self.path / destination).parent.mkdir(parents=True, exist_ok=True)
        self.repo.git.mv(source, destination)

    def commit(self, message: str, actor: Actor = ALICE, date: str = None) -> str:
        """date 는 git 내부 형식 ("1577840400 +0900") 등 GitPython 이 받는 형식"""
        commit = self.repo.index.commit(
            message, author=actor, committer=actor, author_date=date, commit_date=date)
        return commit.hexsha


@pytest.fixture
def repo_builder(tmp_path):
    """빈 저장소를 가진 RepoBuilder"""
    builder = RepoBuilder(tmp_path / "repo")
    yield builder
    builder.repo.close()


@pytest.fixture
def sample_repo(repo_builder):
    """
    Alice 가 두 라인을 추가하고 Bob 이 한 라인을 추가한 저장소

    Returns:
        (RepoBuilder, alice_commit, bob_commit)
    """
    repo_builder.write("Main.java", "class Main {\n    int a;\n")
    alice_commit = repo_builder.commit("Add Main", ALICE)
    repo_builder.write("Main.java", "class Main {\n    int a;\n}\n")
    repo_builder.write("README.md", "readme\n")
    bob_commit = repo_builder.commit("Close class and add readme", BOB)
    return repo_builder, alice_commit, bob_commit
