"""
Webhook Payload Models

테스트 누락 알림용 webhook payload 모델들
"""

from typing import List, Optional

from pydantic import BaseModel


class RepositoryInfo(BaseModel):
    """저장소 정보"""
    owner: str
    name: str
    full_name: str


class AuthorInfo(BaseModel):
    """PR 작성자 정보"""
    login: str
    name: Optional[str] = None


class PullRequestInfo(BaseModel):
    """Pull Request 정보"""
    number: int
    title: str
    description: str
    url: str
    author: AuthorInfo


class ExemptionInfo(BaseModel):
    """테스트 면제 정보"""
    is_exempt: bool
    reason: str = ""


class AnalysisInfo(BaseModel):
    """테스트 분석 결과"""
    missing_tests: List[str]
    affected_files: List[str]
    has_tests: bool
    exemption: ExemptionInfo


class MetadataInfo(BaseModel):
    """실행 메타데이터"""
    timestamp: str
    action: Optional[str] = None
    actor: Optional[str] = None
    event_type: Optional[str] = None


class WebhookPayload(BaseModel):
    """테스트 누락 알림 payload"""
    repository: RepositoryInfo
    pull_request: PullRequestInfo
    analysis: AnalysisInfo
    metadata: MetadataInfo
