"""
Line Attribution Unit Tests

blame 파싱, ignore 목록, 분석 기간, 이름 변경 이력 이어붙이기 테스트
"""
from datetime import datetime

import pytest

from repo_attribution.core.line_attribution import (
    LineAttributionAnalyzer,
    RenameRecord,
    parse_blame_output,
    parse_rename_history,
)
from repo_attribution.core.models import UNKNOWN_AUTHOR, Author, CommitHash, FileType, RepoConfiguration

MAIN_AUTHOR = Author.from_git_id("harryggg")
FAKE_AUTHOR = Author.from_git_id("fakeAuthor")

MAIN_COMMIT = "8d0ac2ee20f04dce8df0591caed460bffacb65a4"
FAKE_COMMIT = "768015345e70f06add2a8b7d1f901dc07bf70582"
RENAME_COMMIT = "9d9a6b8c5e1b2a4f0c3d7e6f8a1b2c3d4e5f6a7b"
NEW_COMMIT = "1111111111111111111111111111111111111111"

BLAME_TEST_SINCE = datetime(2018, 2, 6)
BLAME_TEST_UNTIL = datetime(2018, 2, 8, 23, 59, 59)


def porcelain_line(commit, line_number, author, when, content, filename="blameTest.java", boundary=False):
    lines = [
        f"{commit} {line_number} {line_number} 1",
        f"author {author}",
        f"author-mail <{author}@example.com>",
        f"author-time {int(when.timestamp())}",
        "author-tz +0000",
        f"committer {author}",
        f"committer-mail <{author}@example.com>",
        f"committer-time {int(when.timestamp())}",
        "committer-tz +0000",
        "summary some change",
    ]
    if boundary:
        lines.append("boundary")
    lines.append(f"filename {filename}")
    lines.append(f"\t{content}")
    return "\n".join(lines)


def blame_text(*lines):
    return "\n".join(lines) + "\n"


BLAME_TEST_OUTPUT = blame_text(
    porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 6, 10), "public class blameTest {"),
    porcelain_line(MAIN_COMMIT, 2, "harryggg", datetime(2018, 2, 6, 10), "    public static void main(String[] args) {"),
    porcelain_line(FAKE_COMMIT, 3, "fakeAuthor", datetime(2018, 2, 8, 10), "        System.out.println(\"fake\");"),
    porcelain_line(MAIN_COMMIT, 4, "harryggg", datetime(2018, 2, 6, 10), "    }"),
)


@pytest.fixture
def config():
    return RepoConfiguration(
        location=".",
        since=BLAME_TEST_SINCE,
        until=BLAME_TEST_UNTIL,
        authors=(MAIN_AUTHOR, FAKE_AUTHOR),
    )


def with_ignore_list(config, commits):
    return RepoConfiguration(
        location=config.location,
        since=config.since,
        until=config.until,
        authors=config.authors,
        ignore_commit_list=tuple(CommitHash.convert_strings(commits)),
    )


class TestParseBlameOutput:
    """blame 출력 파싱 테스트"""

    def test_line_porcelain(self):
        entries = parse_blame_output(BLAME_TEST_OUTPUT)

        assert [entry.line_number for entry in entries] == [1, 2, 3, 4]
        assert entries[2].commit_hash == FAKE_COMMIT
        assert entries[2].author_name == "fakeAuthor"
        assert entries[2].author_email == "<fakeAuthor@example.com>"
        assert entries[2].author_time == datetime(2018, 2, 8, 10)
        assert entries[0].content == "public class blameTest {"
        assert entries[0].filename == "blameTest.java"

    def test_porcelain_reuses_commit_metadata(self):
        """--porcelain 형식은 두 번째 등장부터 메타데이터가 생략됨"""
        raw = blame_text(
            porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 6, 10), "first"),
            f"{MAIN_COMMIT} 2 2\n\tsecond",
        )

        entries = parse_blame_output(raw)

        assert len(entries) == 2
        assert entries[1].author_name == "harryggg"
        assert entries[1].content == "second"

    def test_boundary_marker(self):
        raw = porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 6), "x", boundary=True)

        assert parse_blame_output(raw)[0].boundary

    def test_empty_output(self):
        assert parse_blame_output("") == []

    def test_tab_content_is_preserved(self):
        raw = porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 6), "\tindented")

        assert parse_blame_output(raw)[0].content == "\tindented"


class TestParseRenameHistory:
    """이름 변경 이력 파싱 테스트"""

    def test_follow_output(self):
        raw = "\n".join([
            NEW_COMMIT,
            "",
            "M\tnewPos/movedFile.java",
            RENAME_COMMIT,
            "",
            "R100\tmovedFile.java\tnewPos/movedFile.java",
            MAIN_COMMIT,
            "",
            "A\tmovedFile.java",
        ])

        renames = parse_rename_history(raw)

        assert renames == [RenameRecord(CommitHash(RENAME_COMMIT), "movedFile.java", "newPos/movedFile.java")]

    def test_no_renames(self):
        assert parse_rename_history(f"{MAIN_COMMIT}\n\nA\ta.java\n") == []

    def test_quoted_paths_are_unquoted(self):
        """제어 문자가 있는 경로는 git 이 C 스타일로 인용해 출력"""
        raw = "\n".join([
            RENAME_COMMIT,
            "",
            'R100\t"tab\\there.java"\t"new\\303\\251/tab\\there.java"',
        ])

        renames = parse_rename_history(raw)

        assert renames == [RenameRecord(CommitHash(RENAME_COMMIT), "tab\there.java", "newé/tab\there.java")]


class TestLineAttributionAnalyzer:
    """LineAttributionAnalyzer 클래스 테스트"""

    def test_blame(self, config):
        result = LineAttributionAnalyzer(config).analyze_file("blameTest.java", BLAME_TEST_OUTPUT)

        assert result.path == "blameTest.java"
        assert result.file_type == FileType("java")
        assert [line.author for line in result.lines] == [MAIN_AUTHOR, MAIN_AUTHOR, FAKE_AUTHOR, MAIN_AUTHOR]
        assert result.get_line(3).commit_hash == CommitHash(FAKE_COMMIT)

    def test_ignore_fake_author_commit_full_and_short_hash(self, config):
        """전체/축약 해시로 무시해도 결과가 같아야 함"""
        full = LineAttributionAnalyzer(with_ignore_list(config, [FAKE_COMMIT])).analyze_file(
            "blameTest.java", BLAME_TEST_OUTPUT)
        short = LineAttributionAnalyzer(with_ignore_list(config, [FAKE_COMMIT[:8]])).analyze_file(
            "blameTest.java", BLAME_TEST_OUTPUT)

        assert full == short
        assert full.author_line_counts() == short.author_line_counts()
        assert full.get_line(1).author == MAIN_AUTHOR
        assert full.get_line(2).author == MAIN_AUTHOR
        assert full.get_line(4).author == MAIN_AUTHOR
        # 무시된 커밋에서 추가된 라인
        assert full.get_line(3).author == UNKNOWN_AUTHOR

    def test_ignore_all_commits(self, config):
        full = LineAttributionAnalyzer(with_ignore_list(config, [FAKE_COMMIT, MAIN_COMMIT])).analyze_file(
            "blameTest.java", BLAME_TEST_OUTPUT)
        short = LineAttributionAnalyzer(with_ignore_list(config, [FAKE_COMMIT[:8], MAIN_COMMIT[:8]])).analyze_file(
            "blameTest.java", BLAME_TEST_OUTPUT)

        assert full == short
        assert all(line.author == UNKNOWN_AUTHOR for line in full.lines)

    def test_lines_outside_window_are_unknown(self):
        config = RepoConfiguration(
            location=".",
            since=datetime(2018, 2, 7),
            until=BLAME_TEST_UNTIL,
            authors=(MAIN_AUTHOR, FAKE_AUTHOR),
        )

        result = LineAttributionAnalyzer(config).analyze_file("blameTest.java", BLAME_TEST_OUTPUT)

        # 모든 라인은 그대로 존재하고 기간 밖 커밋의 라인만 Unknown
        assert len(result.lines) == 4
        assert result.author_line_counts() == {UNKNOWN_AUTHOR: 3, FAKE_AUTHOR: 1}

    def test_boundary_lines_are_unknown(self, config):
        raw = porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 7), "x", boundary=True)

        result = LineAttributionAnalyzer(config).analyze_file("blameTest.java", raw)

        assert result.get_line(1).author == UNKNOWN_AUTHOR

    def test_unregistered_author_is_unknown(self, config):
        raw = porcelain_line(NEW_COMMIT, 1, "stranger", datetime(2018, 2, 7), "x")

        result = LineAttributionAnalyzer(config).analyze_file("blameTest.java", raw)

        assert result.get_line(1).author == UNKNOWN_AUTHOR

    def test_email_with_addition_operator(self):
        """이메일에 + 가 포함된 작성자"""
        author = Author.from_git_id("myteo", emails=["myteo+git@example.com"])
        config = RepoConfiguration(location=".", authors=(author,))
        raw = porcelain_line(NEW_COMMIT, 1, "myteo", datetime(2019, 3, 28), "x").replace(
            "<myteo@example.com>", "<myteo+git@example.com>")

        result = LineAttributionAnalyzer(config).analyze_file("pr_617.java", raw)

        assert len(result.lines) == 1
        assert result.get_line(1).author == author


class TestRenameStitching:
    """이름 변경된 파일의 귀속 이어붙이기 테스트"""

    MOVED_PATH = "newPos/movedFile.java"
    OLD_PATH = "movedFile.java"

    def _current_blame(self):
        # 이름 변경 커밋이 1, 2번 라인을 소유한 것으로 보고된 상태
        return blame_text(
            porcelain_line(RENAME_COMMIT, 1, "mover", datetime(2018, 2, 8), "class movedFile {",
                           filename=self.MOVED_PATH),
            porcelain_line(RENAME_COMMIT, 2, "mover", datetime(2018, 2, 8), "    int moved;",
                           filename=self.MOVED_PATH),
            porcelain_line(NEW_COMMIT, 3, "fakeAuthor", datetime(2018, 2, 8), "    int added;",
                           filename=self.MOVED_PATH),
            porcelain_line(RENAME_COMMIT, 4, "mover", datetime(2018, 2, 8), "}",
                           filename=self.MOVED_PATH),
        )

    def _prior_blame(self):
        return blame_text(
            porcelain_line(MAIN_COMMIT, 1, "harryggg", datetime(2018, 2, 7), "class movedFile {",
                           filename=self.OLD_PATH),
            porcelain_line(MAIN_COMMIT, 2, "harryggg", datetime(2018, 2, 7), "    int moved;",
                           filename=self.OLD_PATH),
            porcelain_line(FAKE_COMMIT, 3, "fakeAuthor", datetime(2018, 2, 7), "}",
                           filename=self.OLD_PATH),
        )

    def _renames(self):
        return [RenameRecord(CommitHash(RENAME_COMMIT), self.OLD_PATH, self.MOVED_PATH)]

    def test_lines_keep_attribution_across_rename(self, config):
        calls = []

        def provider(path, revision):
            calls.append((path, revision))
            return self._prior_blame()

        result = LineAttributionAnalyzer(config).analyze_file(
            self.MOVED_PATH, self._current_blame(), renames=self._renames(), blame_provider=provider)

        assert calls == [(self.OLD_PATH, f"{RENAME_COMMIT}^")]
        assert [line.line_number for line in result.lines] == [1, 2, 3, 4]
        assert [line.commit_hash.value for line in result.lines] == [MAIN_COMMIT, MAIN_COMMIT, NEW_COMMIT, FAKE_COMMIT]
        assert [line.author for line in result.lines] == [MAIN_AUTHOR, MAIN_AUTHOR, FAKE_AUTHOR, FAKE_AUTHOR]

    def test_stitched_lines_respect_ignore_list(self, config):
        ignored = with_ignore_list(config, [MAIN_COMMIT[:8]])

        result = LineAttributionAnalyzer(ignored).analyze_file(
            self.MOVED_PATH, self._current_blame(), renames=self._renames(),
            blame_provider=lambda path, revision: self._prior_blame())

        assert result.get_line(1).author == UNKNOWN_AUTHOR
        assert result.get_line(2).author == UNKNOWN_AUTHOR
        assert result.get_line(3).author == FAKE_AUTHOR

    def test_unrelated_rename_is_ignored(self, config):
        renames = [RenameRecord(CommitHash(RENAME_COMMIT), "a.java", "b.java")]

        def provider(path, revision):
            raise AssertionError("provider should not be called")

        result = LineAttributionAnalyzer(config).analyze_file(
            self.MOVED_PATH, self._current_blame(), renames=renames, blame_provider=provider)

        assert result.get_line(1).commit_hash == CommitHash(RENAME_COMMIT)

    def test_without_provider_keeps_rename_attribution(self, config):
        result = LineAttributionAnalyzer(config).analyze_file(
            self.MOVED_PATH, self._current_blame(), renames=self._renames())

        assert result.get_line(1).commit_hash == CommitHash(RENAME_COMMIT)
        assert len(result.lines) == 4

    def test_chained_renames(self, config):
        """여러 번 이름이 바뀐 경우 가장 오래된 경로까지 거슬러 올라감"""
        first_rename = "2222222222222222222222222222222222222222"
        renames = self._renames() + [RenameRecord(CommitHash(first_rename), "origin.java", self.OLD_PATH)]
        prior_with_rename = blame_text(
            porcelain_line(first_rename, 1, "mover", datetime(2018, 2, 7), "class movedFile {",
                           filename=self.OLD_PATH),
            porcelain_line(MAIN_COMMIT, 2, "harryggg", datetime(2018, 2, 7), "    int moved;",
                           filename=self.OLD_PATH),
            porcelain_line(FAKE_COMMIT, 3, "fakeAuthor", datetime(2018, 2, 7), "}",
                           filename=self.OLD_PATH),
        )
        origin = porcelain_line(FAKE_COMMIT, 1, "fakeAuthor", datetime(2018, 2, 6, 12), "class movedFile {",
                                filename="origin.java")
        texts = {
            (self.OLD_PATH, f"{RENAME_COMMIT}^"): prior_with_rename,
            ("origin.java", f"{first_rename}^"): origin,
        }

        result = LineAttributionAnalyzer(config).analyze_file(
            self.MOVED_PATH, self._current_blame(), renames=renames,
            blame_provider=lambda path, revision: texts[(path, revision)])

        assert result.get_line(1).commit_hash == CommitHash(FAKE_COMMIT)
        assert result.get_line(1).author == FAKE_AUTHOR
        assert result.get_line(2).author == MAIN_AUTHOR
