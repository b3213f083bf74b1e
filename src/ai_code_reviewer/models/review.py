"""
Review Data Models

테스트 분석, 면제 판단, 리뷰 코멘트 및 AI 응답 계약 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class TestAnalysisResult:
    """변경 파일들에 대한 테스트 존재 여부 분석 결과"""
    __test__ = False  # keeps pytest from collecting this class

    has_tests: bool
    missing_tests: List[str] = field(default_factory=list)
    affected_files: List[str] = field(default_factory=list)
    test_files: List[str] = field(default_factory=list)

    @property
    def requires_tests(self) -> bool:
        """테스트가 필요한 파일이 하나라도 있는지"""
        return len(self.affected_files) > 0

    @property
    def tests_missing(self) -> bool:
        """테스트가 필요하지만 diff 전체에 테스트 파일이 없는 경우"""
        return self.requires_tests and not self.has_tests


@dataclass(frozen=True)
class ExemptionDecision:
    """PR 설명 기반 테스트 면제 판단"""
    is_exempt: bool
    reason: str = ""
    matched_keyword: Optional[str] = None

    @classmethod
    def not_exempt(cls) -> "ExemptionDecision":
        return cls(is_exempt=False, reason="")


@dataclass(frozen=True)
class ReviewComment:
    """파일의 특정 라인에 고정되는 리뷰 코멘트"""
    path: str
    line: int
    body: str

    def __post_init__(self):
        """데이터 검증"""
        if not self.path:
            raise ValueError("Comment path cannot be empty")
        if not self.body.strip():
            raise ValueError("Comment body cannot be empty")

    def to_github(self) -> dict:
        """GitHub review API의 comments 항목 형식"""
        return {'path': self.path, 'line': self.line, 'body': self.body}


# Pydantic models for the AI response contract
class AIReviewItem(BaseModel):
    """AI 응답의 개별 리뷰 항목"""
    model_config = ConfigDict(populate_by_name=True)

    line_number: Union[int, str] = Field(alias='lineNumber')
    review_comment: str = Field(alias='reviewComment')

    @field_validator('review_comment')
    @classmethod
    def validate_comment(cls, v):
        if not v.strip():
            raise ValueError('Review comment cannot be empty')
        return v.strip()


class AIReviewResponse(BaseModel):
    """{"reviews": [...]} 형식의 AI 응답"""
    reviews: List[AIReviewItem]
