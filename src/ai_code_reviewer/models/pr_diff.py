"""
PR Diff Data Models

Pull Request 및 diff 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PRContext:
    """실행 시점의 Pull Request 스냅샷"""
    owner: str
    repo: str
    pull_number: int
    title: str
    description: str
    author_login: str
    author_name: str

    def __post_init__(self):
        """데이터 검증"""
        if self.pull_number <= 0:
            raise ValueError("PR number must be positive")
        if not self.owner or not self.repo:
            raise ValueError("Repository owner and name are required")

    @property
    def full_name(self) -> str:
        """'owner/repo' 형식의 저장소 이름"""
        return f"{self.owner}/{self.repo}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.full_name}/pull/{self.pull_number}"


@dataclass
class ChangeLine:
    """hunk 안의 한 줄 (추가, 삭제, 컨텍스트)"""
    change_type: str  # 'add', 'del', 'normal'
    content: str
    new_line: Optional[int] = None
    old_line: Optional[int] = None

    def __post_init__(self):
        """데이터 검증"""
        valid_types = {'add', 'del', 'normal'}
        if self.change_type not in valid_types:
            raise ValueError(f"Invalid change_type: {self.change_type}")
        if self.new_line is None and self.old_line is None:
            raise ValueError("A change line needs at least one line number")

    @property
    def line_number(self) -> int:
        """새 파일 기준 라인 번호, 없으면 이전 파일 기준"""
        return self.new_line if self.new_line is not None else self.old_line


@dataclass
class Hunk:
    """파일 diff의 연속된 변경 블록"""
    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    changes: List[ChangeLine] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")


@dataclass
class DiffFile:
    """diff에 포함된 변경 파일"""
    from_path: Optional[str]
    to_path: Optional[str]  # None이면 삭제된 파일
    hunks: List[Hunk] = field(default_factory=list)
    is_binary: bool = False

    @property
    def is_deleted(self) -> bool:
        """삭제된 파일 여부"""
        return self.to_path is None
