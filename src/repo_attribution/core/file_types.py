"""
File Type Classifier

파일 경로를 glob 패턴 또는 확장자로 FileType 에 분류합니다.
"""
import fnmatch
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional

from .models import FileType


class FileTypeClassifier:
    """경로 -> FileType 순수 함수 객체"""

    def __init__(self, file_types: Optional[Iterable[FileType]] = None, fallback_to_extension: bool = True):
        """
        FileTypeClassifier 초기화

        Args:
            file_types: 순서대로 검사할 FileType 목록 (처음 일치한 것을 사용)
            fallback_to_extension: 일치하는 패턴이 없을 때 확장자를 라벨로 사용할지 여부
        """
        self.file_types: List[FileType] = list(file_types or [])
        self.fallback_to_extension = fallback_to_extension

    @classmethod
    def from_mapping(cls, mapping: Dict[str, List[str]], fallback_to_extension: bool = True) -> 'FileTypeClassifier':
        """{"docs": ["docs/**", "*.md"], ...} 형태의 설정에서 생성"""
        file_types = [FileType(label, tuple(patterns)) for label, patterns in mapping.items()]
        return cls(file_types, fallback_to_extension=fallback_to_extension)

    def __call__(self, path: str) -> FileType:
        return self.classify(path)

    def classify(self, path: str) -> FileType:
        normalized = path.replace("\\", "/")
        for file_type in self.file_types:
            for pattern in file_type.patterns:
                if _glob_match(normalized, pattern):
                    return file_type

        if self.fallback_to_extension:
            suffix = PurePosixPath(normalized).suffix.lower()
            if suffix:
                return FileType(suffix[1:])
        return FileType.OTHER


def _glob_match(path: str, pattern: str) -> bool:
    # "**/" 접두사는 루트 경로의 파일도 포함
    if pattern.startswith("**/") and fnmatch.fnmatch(path, pattern[3:]):
        return True
    if "/" not in pattern:
        return fnmatch.fnmatch(PurePosixPath(path).name, pattern)
    return fnmatch.fnmatch(path, pattern)


DEFAULT_CLASSIFIER = FileTypeClassifier()
